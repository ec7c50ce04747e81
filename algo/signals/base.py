"""分析器协议：K 线序列 -> Status。"""

from __future__ import annotations

from typing import Protocol, Sequence

from shared.models.models import Candle, Status


class Analyzer(Protocol):
    def analyze(self, candles: Sequence[Candle]) -> Status:
        """对一段按时间升序的 K 线给出最新状态。"""
        ...
