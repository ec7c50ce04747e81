"""配置 Schema 校验（raw dict 阶段）。

目标：
- 在启动阶段尽早失败，避免 typo 在长时间运行后才暴露；
- 对未知字段给出 "did you mean" 提示；fetcher/executor 的参数由各自实现解释。
"""

from __future__ import annotations

import difflib
from typing import Any, Iterable

TOP_ALLOWED = {"interval_secs", "fail_fast", "indicator", "strategy", "actors"}
INDICATOR_ALLOWED = {"type", "fast", "slow", "signal"}
STRATEGY_ALLOWED = {"type", "rest_period", "hold_period", "amounts"}
ACTOR_ALLOWED = {"fetcher", "pairs", "executors"}


def _suggest_key(key: str, allowed: Iterable[str]) -> str | None:
    matches = difflib.get_close_matches(key, list(allowed), n=1, cutoff=0.75)
    return matches[0] if matches else None


def _ensure_allowed_keys(block: dict[str, Any], *, allowed: set[str], ctx: str) -> None:
    unknown = [k for k in block.keys() if k not in allowed]
    if not unknown:
        return
    parts = []
    for k in sorted(unknown):
        suggestion = _suggest_key(k, allowed)
        if suggestion:
            parts.append(f"{k} (did you mean '{suggestion}'?)")
        else:
            parts.append(k)
    raise ValueError(f"{ctx} contains unknown keys: {', '.join(parts)}")


def _expect_dict(val: Any, *, ctx: str) -> dict[str, Any]:
    if not isinstance(val, dict):
        raise ValueError(f"{ctx} must be a dict")
    return val


def _expect_list(val: Any, *, ctx: str) -> list[Any]:
    if not isinstance(val, list):
        raise ValueError(f"{ctx} must be a list")
    return val


def validate_raw_config(cfg: dict[str, Any]) -> None:
    """校验 raw config dict（来自 YAML + env 展开后）。"""
    if not isinstance(cfg, dict):
        raise ValueError("Config root must be a dict")
    _ensure_allowed_keys(cfg, allowed=TOP_ALLOWED, ctx="config")

    if cfg.get("indicator") is not None:
        indicator = _expect_dict(cfg["indicator"], ctx="config.indicator")
        _ensure_allowed_keys(indicator, allowed=INDICATOR_ALLOWED, ctx="config.indicator")

    if cfg.get("strategy") is not None:
        strategy = _expect_dict(cfg["strategy"], ctx="config.strategy")
        _ensure_allowed_keys(strategy, allowed=STRATEGY_ALLOWED, ctx="config.strategy")
        if strategy.get("amounts") is not None:
            _expect_dict(strategy["amounts"], ctx="config.strategy.amounts")

    actors = _expect_dict(cfg.get("actors") or {}, ctx="config.actors")
    if not actors:
        raise ValueError("config.actors must declare at least one actor")
    for key, actor in actors.items():
        ctx = f"config.actors.{key}"
        actor = _expect_dict(actor, ctx=ctx)
        _ensure_allowed_keys(actor, allowed=ACTOR_ALLOWED, ctx=ctx)
        if "fetcher" not in actor:
            raise ValueError(f"Missing required config key: {ctx}.fetcher")
        _expect_dict(actor["fetcher"], ctx=f"{ctx}.fetcher")
        if actor.get("pairs") is not None:
            _expect_list(actor["pairs"], ctx=f"{ctx}.pairs")
        if actor.get("executors") is not None:
            for i, item in enumerate(_expect_list(actor["executors"], ctx=f"{ctx}.executors")):
                _expect_dict(item, ctx=f"{ctx}.executors[{i}]")
