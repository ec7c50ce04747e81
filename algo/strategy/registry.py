"""策略注册表：字符串 -> Strategy 实现。"""

from __future__ import annotations

from typing import Any, Mapping

from algo.strategy.base import Strategy
from algo.strategy.throttle import ThrottleStrategy
from shared.config.schema import StrategyConfig

_REGISTRY: dict[str, type[Strategy]] = {}


def register_strategy(name: str, cls: type[Strategy]) -> None:
    _REGISTRY[name] = cls


def get_strategy_cls(name: str) -> type[Strategy]:
    if name not in _REGISTRY:
        raise ValueError(f"Unknown strategy: {name}")
    return _REGISTRY[name]


def build_strategy(cfg: StrategyConfig | Mapping[str, Any] | None) -> Strategy | None:
    """从配置构建策略实例；未配置策略时返回 None（只推送信号，不分档）。

    支持：
    - StrategyConfig（来自 shared.config.schema）
    - dict（含 type + 参数字段）
    """
    if cfg is None:
        return None

    if isinstance(cfg, StrategyConfig):
        name = str(cfg.type)
        params = cfg.model_dump(exclude={"type"})
    elif isinstance(cfg, Mapping):
        name = str(cfg.get("type") or "throttle")
        params = dict(cfg)
        params.pop("type", None)
    else:
        raise ValueError("strategy cfg must be StrategyConfig or dict")

    cls = get_strategy_cls(name)
    try:
        return cls(**params)
    except TypeError as exc:
        raise ValueError(f"Invalid params for strategy '{name}': {params}") from exc


# 默认注册
register_strategy("throttle", ThrottleStrategy)
