"""推送注册表：字符串 -> Executor 实现。"""

from __future__ import annotations

from typing import Any, Mapping

from executor.base import Executor
from executor.log_executor import LogExecutor
from executor.webhook import DiscordExecutor, SlackExecutor

_REGISTRY: dict[str, type[Executor]] = {}


def register_executor(name: str, cls: type[Executor]) -> None:
    _REGISTRY[name] = cls


def get_executor_cls(name: str) -> type[Executor]:
    if name not in _REGISTRY:
        raise ValueError(f"Unknown executor: {name}")
    return _REGISTRY[name]


def build_executor(cfg: Mapping[str, Any]) -> Executor:
    """从 `{"type": ..., ...参数}` 构建推送实例。"""
    params = dict(cfg)
    name = str(params.pop("type", "")).strip().lower()
    cls = get_executor_cls(name)
    try:
        return cls(**params)
    except TypeError as exc:
        raise ValueError(f"Invalid params for executor '{name}': {params}") from exc


# 默认注册
register_executor("log", LogExecutor)
register_executor("slack", SlackExecutor)
register_executor("discord", DiscordExecutor)
