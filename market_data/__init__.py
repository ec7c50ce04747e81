"""行情数据模块（market_data）。

该包聚合：
- 行情拉取客户端（Bitfinex REST / ccxt / 内存）
- 本地 CSV 历史 K 线读取
"""

from market_data.client import BitfinexFetcher, CcxtFetcher, Fetcher, StaticFetcher, get_fetcher
from market_data.loader import CsvFetcher

__all__ = [
    "Fetcher",
    "StaticFetcher",
    "BitfinexFetcher",
    "CcxtFetcher",
    "CsvFetcher",
    "get_fetcher",
]
