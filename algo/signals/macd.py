"""MACD 交叉分析器。

分类规则（两点交叉，无滞回区间）：
- 最新柱 `macd - signal <= 0` → QUIT；
- 最新柱 > 0 且上一柱 <= 0（刚刚上穿）→ BUY；
- 最新柱 > 0 且上一柱 > 0 → HOLD。

没有“刚刚下穿”的对称状态：只要在 signal 线下方（或重合）每一步都是 QUIT。
"""

from __future__ import annotations

from typing import Sequence

from algo.factors.macd import HistogramPoint, check_periods, macd_histogram
from shared.errors import InsufficientData
from shared.models.models import Candle, Status


def classify(points: Sequence[HistogramPoint]) -> Status:
    if len(points) < 2:
        raise InsufficientData(f"Not enough histograms: got {len(points)}, need 2")
    last, prev = points[-1], points[-2]
    if last.diff <= 0:
        return Status.QUIT
    if prev.diff <= 0:
        return Status.BUY
    return Status.HOLD


class MacdAnalyzer:
    """以收盘价计算 MACD 柱并给出最新状态。

    Parameters
    ----------
    fast, slow, signal:
        EMA 周期，要求 `fast < slow`、均 >= 1。
    """

    def __init__(self, fast: int = 12, slow: int = 26, signal: int = 9):
        check_periods(fast, slow, signal)
        self.fast = fast
        self.slow = slow
        self.signal = signal

    @property
    def min_candles(self) -> int:
        # 产出两个柱所需的最少 K 线数
        return self.slow + self.signal + 2

    def histogram(self, candles: Sequence[Candle]) -> list[HistogramPoint]:
        closes = [c.close for c in candles]
        return macd_histogram(closes, self.fast, self.slow, self.signal)

    def analyze(self, candles: Sequence[Candle]) -> Status:
        return classify(self.histogram(candles))
