"""配置架构定义（Pydantic Schema）。

目标：
- 配置是“强类型”的边界协议，启动阶段尽早失败；
- 周期参数、金额分档的正负/大小关系在这里一次性校验，运行期不再重复检查。
"""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class IndicatorConfig(BaseModel):
    """MACD 周期配置。"""
    type: Literal["macd"] = "macd"
    fast: int = Field(default=12, ge=1)
    slow: int = Field(default=26, ge=1)
    signal: int = Field(default=9, ge=1)

    model_config = ConfigDict(extra="forbid")

    @model_validator(mode="after")
    def _check_order(self) -> "IndicatorConfig":
        if self.fast >= self.slow:
            raise ValueError(f"indicator.fast must be < indicator.slow (fast={self.fast}, slow={self.slow})")
        return self


class StrategyConfig(BaseModel):
    """节流策略配置。

    说明：
    - rest_period / hold_period 单位为毫秒；
    - amounts: 交易对 -> [small, big]，均 >= 0。
    """
    type: str = "throttle"
    rest_period: int = Field(default=0, ge=0)
    hold_period: int = Field(default=0, ge=0)
    amounts: Dict[str, Tuple[float, float]] = Field(default_factory=dict)

    model_config = ConfigDict(extra="forbid")

    @field_validator("amounts")
    @classmethod
    def _non_negative(cls, v: Dict[str, Tuple[float, float]]) -> Dict[str, Tuple[float, float]]:
        for pair, (small, big) in v.items():
            if small < 0 or big < 0:
                raise ValueError(f"strategy.amounts.{pair} must be >= 0")
        return v


class ActorConfig(BaseModel):
    """一个行情源 + 其跟踪的交易对 + 推送目标。"""
    fetcher: Dict[str, Any]
    pairs: List[str] = Field(default_factory=list)
    executors: List[Dict[str, Any]] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid")

    @field_validator("fetcher")
    @classmethod
    def _fetcher_has_type(cls, v: Dict[str, Any]) -> Dict[str, Any]:
        if not str(v.get("type") or "").strip():
            raise ValueError("fetcher.type is required")
        return v

    @field_validator("executors")
    @classmethod
    def _executors_have_type(cls, v: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        for item in v:
            if not str(item.get("type") or "").strip():
                raise ValueError("executor.type is required")
        return v


class MainConfig(BaseModel):
    """应用总配置。"""
    interval_secs: float = Field(default=3600.0, gt=0)
    fail_fast: bool = True
    indicator: IndicatorConfig = Field(default_factory=IndicatorConfig)
    strategy: Optional[StrategyConfig] = None
    actors: Dict[str, ActorConfig] = Field(default_factory=dict)

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    @model_validator(mode="after")
    def _pairs_have_amounts(self) -> "MainConfig":
        if self.strategy is None:
            return self
        missing = sorted(
            {pair for actor in self.actors.values() for pair in actor.pairs if pair not in self.strategy.amounts}
        )
        if missing:
            raise ValueError(f"strategy.amounts missing for pairs: {', '.join(missing)}")
        return self


# 兼容旧命名
AppConfig = MainConfig
