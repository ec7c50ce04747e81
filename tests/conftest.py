import sys
from pathlib import Path

import pytest

# 确保项目根目录在 sys.path，便于测试内直接以顶层包名导入
ROOT = Path(__file__).resolve().parents[1]
root_str = str(ROOT)
if root_str not in sys.path:
    sys.path.insert(0, root_str)

from shared.models.models import Candle  # noqa: E402


def candles_from_closes(closes, start_ts: int = 1_700_000_000_000, step_ms: int = 60_000) -> list[Candle]:
    return [
        Candle(ts=start_ts + i * step_ms, open=c, high=c + 1, low=c - 1, close=c, volume=1.0)
        for i, c in enumerate(closes)
    ]


# 37 根平盘之后上涨两根再急跌：下标 37 上穿（Buy）、38 持有（Hold）、39 跌破（Quit）
CROSS_CLOSES = [100.0] * 37 + [101.0, 102.0, 90.0]


@pytest.fixture
def make_candles():
    return candles_from_closes


@pytest.fixture
def cross_closes() -> list[float]:
    return list(CROSS_CLOSES)
