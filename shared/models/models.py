"""核心数据结构：Candle/Status/SignalEvent/Order。"""

from __future__ import annotations

import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Sequence


def now_ms() -> int:
    return int(time.time() * 1000)


@dataclass(frozen=True)
class Candle:
    """K 线数据（ts 为毫秒时间戳）。"""
    ts: int
    open: float
    high: float
    low: float
    close: float
    volume: float

    @property
    def price(self) -> float:
        return self.close

    @classmethod
    def from_row(cls, row: Sequence) -> "Candle":
        """从交易所 OHLCV 行 `[ts, open, high, low, close, volume]` 构建。"""
        ts, open_, high, low, close, volume = row[:6]
        return cls(
            ts=int(ts),
            open=float(open_),
            high=float(high),
            low=float(low),
            close=float(close),
            volume=float(volume or 0.0),
        )


class Status(Enum):
    """一次分析的结论。"""

    BUY = "buy"
    HOLD = "hold"
    QUIT = "quit"


@dataclass(frozen=True)
class SignalEvent:
    """某个交易对在某次分析时刻的信号。"""
    ts: int          # 毫秒
    pair: str
    status: Status

    @classmethod
    def now(cls, pair: str, status: Status, clock: Callable[[], int] | None = None) -> "SignalEvent":
        return cls(ts=int((clock or now_ms)()), pair=pair, status=status)


@dataclass(frozen=True)
class Order:
    """策略放行的下单建议；Quit 的 amount 恒为 0，仅作提示。"""
    event: SignalEvent
    amount: float

    @property
    def pair(self) -> str:
        return self.event.pair

    @property
    def ts(self) -> int:
        return self.event.ts

    @property
    def status(self) -> Status:
        return self.event.status
