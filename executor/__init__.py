"""信号推送层（executor）。

统一接口：`Executor.execute(event, amount, candle) -> dict`。
"""

from executor.base import Executor
from executor.log_executor import LogExecutor
from executor.registry import build_executor
from executor.webhook import DiscordExecutor, SlackExecutor

__all__ = [
    "Executor",
    "LogExecutor",
    "SlackExecutor",
    "DiscordExecutor",
    "build_executor",
]
