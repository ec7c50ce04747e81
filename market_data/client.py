"""行情拉取客户端（Bitfinex REST / ccxt / 内存数据）。

所有实现都返回按时间升序（旧 → 新）的 K 线；时间戳必须严格递增。
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Mapping, Sequence

import ccxt
import requests

from shared.errors import FetchFailure
from shared.models.models import Candle
from shared.utils.logging import setup_logger


def ensure_ordered(pair: str, candles: Sequence[Candle]) -> list[Candle]:
    """校验时间戳严格递增，否则抛 FetchFailure。"""
    out = list(candles)
    for prev, cur in zip(out, out[1:]):
        if cur.ts <= prev.ts:
            raise FetchFailure(f"Candles for {pair} are not strictly ascending at ts={cur.ts}")
    return out


class Fetcher(ABC):
    """行情拉取抽象基类。"""

    @abstractmethod
    def fetch(self, pair: str) -> list[Candle]:
        """拉取 K 线。

        Parameters
        ----------
        pair:
            交易对（格式由具体交易所决定）。

        Returns
        -------
        list[Candle]
            按时间升序的 K 线。

        Raises
        ------
        FetchFailure
            网络错误、响应解析失败或时间戳乱序。
        """
        raise NotImplementedError


class StaticFetcher(Fetcher):
    """内存数据源，便于离线开发/测试。"""

    def __init__(self, series: Mapping[str, Sequence[Candle]] | None = None):
        self.series: dict[str, list[Candle]] = {k: list(v) for k, v in (series or {}).items()}

    def set(self, pair: str, candles: Sequence[Candle]) -> None:
        self.series[pair] = list(candles)

    def fetch(self, pair: str) -> list[Candle]:
        if pair not in self.series:
            raise FetchFailure(f"No candles loaded for {pair}")
        return ensure_ordered(pair, self.series[pair])


class BitfinexFetcher(Fetcher):
    """Bitfinex 公共 REST K 线。

    Bitfinex 返回的行是 `[MTS, OPEN, CLOSE, HIGH, LOW, VOLUME]`，且按时间倒序。
    """

    BASE_URL = "https://api-pub.bitfinex.com/v2"

    def __init__(
        self,
        timeframe: str = "1D",
        limit: int = 240,
        base_url: str | None = None,
        timeout: float = 10.0,
        logger=None,
    ):
        if limit <= 0:
            raise ValueError("limit must be > 0")
        self.timeframe = timeframe
        self.limit = int(limit)
        self.base_url = (base_url or self.BASE_URL).rstrip("/")
        self.timeout = timeout
        self.logger = logger or setup_logger("market-bitfinex")

    def _url(self, pair: str) -> str:
        return f"{self.base_url}/candles/trade:{self.timeframe}:t{pair}/hist"

    def fetch(self, pair: str) -> list[Candle]:
        url = self._url(pair)
        try:
            resp = requests.get(url, params={"limit": self.limit}, timeout=self.timeout)
            resp.raise_for_status()
            rows = resp.json()
        except (requests.RequestException, ValueError) as exc:
            raise FetchFailure(f"Bitfinex fetch failed for {pair}: {exc}") from exc

        if not isinstance(rows, list):
            raise FetchFailure(f"Unexpected Bitfinex payload for {pair}: {rows!r}")
        try:
            candles = [
                Candle(
                    ts=int(r[0]),
                    open=float(r[1]),
                    close=float(r[2]),
                    high=float(r[3]),
                    low=float(r[4]),
                    volume=float(r[5]),
                )
                for r in reversed(rows)
            ]
        except (TypeError, ValueError, IndexError) as exc:
            raise FetchFailure(f"Malformed Bitfinex candle for {pair}: {exc}") from exc
        self.logger.debug("Fetched %s candles for %s (%s)", len(candles), pair, self.timeframe)
        return ensure_ordered(pair, candles)


class CcxtFetcher(Fetcher):
    """基于 ccxt `fetch_ohlcv` 的通用拉取（交易对使用 ccxt 统一格式，如 BTC/USDT）。"""

    def __init__(
        self,
        exchange: str = "binance",
        timeframe: str = "1d",
        limit: int = 240,
        options: Mapping[str, Any] | None = None,
        client: Any = None,
        logger=None,
    ):
        if limit <= 0:
            raise ValueError("limit must be > 0")
        self.exchange = exchange
        self.timeframe = timeframe
        self.limit = int(limit)
        self.logger = logger or setup_logger(f"market-{exchange}")
        if client is None:
            exchange_cls = getattr(ccxt, exchange, None)
            if exchange_cls is None:
                raise ValueError(f"Unsupported ccxt exchange: {exchange}")
            client = exchange_cls({"enableRateLimit": True, **dict(options or {})})
        self.client = client

    def fetch(self, pair: str) -> list[Candle]:
        try:
            rows = self.client.fetch_ohlcv(pair, timeframe=self.timeframe, limit=self.limit)
        except ccxt.BaseError as exc:
            raise FetchFailure(f"{self.exchange} fetch_ohlcv failed for {pair}: {exc}") from exc
        try:
            candles = [Candle.from_row(r) for r in rows]
        except (TypeError, ValueError) as exc:
            raise FetchFailure(f"Malformed {self.exchange} candle for {pair}: {exc}") from exc
        return ensure_ordered(pair, candles)


def get_fetcher(cfg: Mapping[str, Any], logger=None) -> Fetcher:
    """根据配置构建 Fetcher。

    Parameters
    ----------
    cfg:
        `{"type": "bitfinex" | "ccxt" | "csv", ...参数}`。

    Returns
    -------
    Fetcher
        对应类型的实例。
    """
    params = dict(cfg)
    kind = str(params.pop("type", "")).strip().lower()

    if kind == "bitfinex":
        return BitfinexFetcher(logger=logger, **params)
    if kind == "ccxt":
        return CcxtFetcher(logger=logger, **params)
    if kind == "csv":
        from market_data.loader import CsvFetcher

        return CsvFetcher(**params)
    raise ValueError(f"Unsupported fetcher type: {kind or '<empty>'}")
