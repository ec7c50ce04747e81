"""本地历史 K 线读取。

CSV 列：`ts,open,high,low,close,volume`（ts 为毫秒或秒时间戳）。
"""

from __future__ import annotations

from pathlib import Path

import pandas as pd

from market_data.client import Fetcher, ensure_ordered
from shared.errors import FetchFailure
from shared.models.models import Candle
from shared.utils.frames import frame_to_candles


def _normalize_ts(ts: pd.Series) -> pd.Series:
    ts = ts.astype("int64")
    # 秒级时间戳统一为毫秒
    return ts.where(ts > 1e12, ts * 1000)


def load_candles_from_csv(path: str | Path) -> list[Candle]:
    """从 CSV 读取 K 线，按 ts 升序返回。"""
    df = pd.read_csv(path)
    df["ts"] = _normalize_ts(df["ts"])
    if "volume" not in df.columns:
        df["volume"] = 0.0
    df = df.sort_values("ts", kind="stable").reset_index(drop=True)
    return frame_to_candles(df)


class CsvFetcher(Fetcher):
    """从 `{data_dir}/{pair}.csv` 读取 K 线（交易对中的 `/` 会被去掉）。"""

    def __init__(self, data_dir: str = "dataset/history", limit: int | None = None):
        self.data_dir = Path(data_dir)
        self.limit = limit

    def path_for(self, pair: str) -> Path:
        return self.data_dir / f"{pair.replace('/', '')}.csv"

    def fetch(self, pair: str) -> list[Candle]:
        path = self.path_for(pair)
        if not path.exists():
            raise FetchFailure(f"History file not found for {pair}: {path}")
        try:
            candles = load_candles_from_csv(path)
        except (KeyError, ValueError, pd.errors.ParserError) as exc:
            raise FetchFailure(f"Invalid history file {path}: {exc}") from exc
        if self.limit:
            candles = candles[-int(self.limit):]
        return ensure_ordered(pair, candles)
