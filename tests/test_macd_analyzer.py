from __future__ import annotations

import pytest

from algo.factors.macd import HistogramPoint
from algo.signals.macd import MacdAnalyzer, classify
from shared.errors import InsufficientData
from shared.models.models import Status


def _point(diff: float) -> HistogramPoint:
    return HistogramPoint(macd=diff, signal=0.0)


@pytest.mark.parametrize(
    "prev,last,expected",
    [
        (-1.0, 1.0, Status.BUY),
        (0.0, 1.0, Status.BUY),
        (1.0, 2.0, Status.HOLD),
        (1.0, 0.0, Status.QUIT),
        (1.0, -1.0, Status.QUIT),
        (-1.0, -2.0, Status.QUIT),
        (0.0, 0.0, Status.QUIT),
    ],
)
def test_classify(prev, last, expected):
    assert classify([_point(prev), _point(last)]) is expected


def test_classify_only_looks_at_last_two_points():
    points = [_point(5.0), _point(-3.0), _point(-1.0), _point(2.0)]
    assert classify(points) is Status.BUY


def test_classify_needs_two_points():
    with pytest.raises(InsufficientData):
        classify([_point(1.0)])
    with pytest.raises(InsufficientData):
        classify([])


def test_buy_exactly_at_the_crossing(make_candles, cross_closes):
    analyzer = MacdAnalyzer()
    statuses = [analyzer.analyze(make_candles(cross_closes[:n])) for n in range(37, 41)]
    assert statuses == [Status.QUIT, Status.BUY, Status.HOLD, Status.QUIT]


def test_hold_while_rise_continues(make_candles):
    closes = [100.0] * 37 + [100.0 + i for i in range(1, 11)]
    analyzer = MacdAnalyzer()
    assert analyzer.analyze(make_candles(closes[:38])) is Status.BUY
    for n in range(39, len(closes) + 1):
        assert analyzer.analyze(make_candles(closes[:n])) is Status.HOLD


def test_quit_on_every_step_below_signal(make_candles):
    closes = [100.0] * 37 + [100.0 - i for i in range(1, 11)]
    analyzer = MacdAnalyzer()
    for n in range(37, len(closes) + 1):
        assert analyzer.analyze(make_candles(closes[:n])) is Status.QUIT


def test_insufficient_candles(make_candles):
    analyzer = MacdAnalyzer()
    assert analyzer.min_candles == 37
    # 36 根只够一个柱
    with pytest.raises(InsufficientData):
        analyzer.analyze(make_candles([100.0] * 36))
    with pytest.raises(InsufficientData):
        analyzer.analyze(make_candles([100.0] * 10))


def test_custom_periods(make_candles):
    analyzer = MacdAnalyzer(fast=2, slow=3, signal=2)
    assert analyzer.min_candles == 7
    points = analyzer.histogram(make_candles([1.0, 2.0, 4.0, 8.0, 16.0, 32.0, 64.0]))
    assert len(points) == 2
    # 指数上涨：macd 始终在 signal 上方
    assert analyzer.analyze(make_candles([1.0, 2.0, 4.0, 8.0, 16.0, 32.0, 64.0])) is Status.HOLD


def test_rejects_bad_periods():
    with pytest.raises(ValueError):
        MacdAnalyzer(fast=26, slow=12)
