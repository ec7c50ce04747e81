"""DataFrame -> Candle 列表。"""

from __future__ import annotations

import pandas as pd

from shared.models.models import Candle

CANDLE_COLUMNS = ["ts", "open", "high", "low", "close", "volume"]


def frame_to_candles(df: pd.DataFrame) -> list[Candle]:
    missing = [col for col in CANDLE_COLUMNS if col not in df.columns]
    if missing:
        raise ValueError(f"Candle frame missing columns: {', '.join(missing)}")
    return [
        Candle.from_row(row)
        for row in df[CANDLE_COLUMNS].itertuples(index=False, name=None)
    ]
