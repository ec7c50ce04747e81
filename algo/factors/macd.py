"""MACD 柱计算。

EMA 初值对齐方式：
- fast EMA 以 `prices[fast-1 .. slow-1]` 的简单均值为初值；
- slow EMA 以 `prices[0 .. slow-1]` 的简单均值为初值；
- 从下标 `slow` 开始两条 EMA 同步递推，得到第一条 macd。
signal EMA 以前 `signal` 个 macd 的简单均值为初值，之后每个 macd 产出一个柱。
初值对齐错位会让之后每一个 EMA 值都整体偏移。
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from shared.errors import InsufficientData


def multiplier(period: int) -> float:
    """EMA 平滑系数 `2 / (period + 1)`。"""
    return 2.0 / (period + 1)


@dataclass(frozen=True)
class HistogramPoint:
    macd: float
    signal: float

    @property
    def diff(self) -> float:
        return self.macd - self.signal


def check_periods(fast: int, slow: int, signal: int) -> None:
    if fast <= 0 or slow <= 0 or signal <= 0:
        raise ValueError("MACD periods must be > 0")
    if fast >= slow:
        raise ValueError(f"MACD fast period must be < slow period (fast={fast}, slow={slow})")


def _macd_lines(prices: Sequence[float], fast: int, slow: int, signal: int) -> tuple[list[float], list[float]]:
    """返回 (macds, signals)：macds[k] 对应 prices[slow + k]，signals[j] 对应 macds[signal + j]。"""
    if len(prices) < slow:
        return [], []
    fast_k = multiplier(fast)
    slow_k = multiplier(slow)
    signal_k = multiplier(signal)

    fast_ema = sum(prices[fast - 1:slow]) / (slow - fast + 1)
    slow_ema = sum(prices[:slow]) / slow
    macds: list[float] = []
    for price in prices[slow:]:
        fast_ema += (price - fast_ema) * fast_k
        slow_ema += (price - slow_ema) * slow_k
        macds.append(fast_ema - slow_ema)

    if len(macds) < signal:
        return macds, []
    signal_ema = sum(macds[:signal]) / signal
    signals: list[float] = []
    for macd in macds[signal:]:
        signal_ema += (macd - signal_ema) * signal_k
        signals.append(signal_ema)
    return macds, signals


def macd_histogram(prices: Sequence[float], fast: int = 12, slow: int = 26, signal: int = 9) -> list[HistogramPoint]:
    """计算 MACD 柱序列（旧 → 新）。

    Raises
    ------
    InsufficientData
        价格数量少于 `slow + signal + 1`。
    """
    check_periods(fast, slow, signal)
    need = slow + signal + 1
    if len(prices) < need:
        raise InsufficientData(f"Not enough prices for MACD({fast},{slow},{signal}): got {len(prices)}, need {need}")
    macds, signals = _macd_lines([float(p) for p in prices], fast, slow, signal)
    return [HistogramPoint(macd=m, signal=s) for m, s in zip(macds[signal:], signals)]
