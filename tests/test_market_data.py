from __future__ import annotations

from typing import Any

import ccxt
import pandas as pd
import pytest
import requests

import market_data.client as client_mod
from market_data.client import BitfinexFetcher, CcxtFetcher, StaticFetcher, ensure_ordered, get_fetcher
from market_data.loader import CsvFetcher, load_candles_from_csv
from shared.errors import FetchFailure
from shared.models.models import Candle
from shared.utils.frames import frame_to_candles


class _FakeResponse:
    def __init__(self, payload: Any, status_code: int = 200):
        self._payload = payload
        self.status_code = status_code

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Server Error")

    def json(self) -> Any:
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


class _FakeCcxtClient:
    def __init__(self, rows=None, exc: Exception | None = None):
        self.rows = rows or []
        self.exc = exc
        self.calls: list[tuple[str, str, int]] = []

    def fetch_ohlcv(self, symbol, timeframe="1d", limit=None):
        self.calls.append((symbol, timeframe, limit))
        if self.exc is not None:
            raise self.exc
        return self.rows


def test_bitfinex_fetch_reverses_and_maps_columns(monkeypatch):
    calls: list[dict[str, Any]] = []
    # [MTS, OPEN, CLOSE, HIGH, LOW, VOLUME]，新 → 旧
    rows = [
        [3000, 12.0, 13.0, 14.0, 11.0, 30.0],
        [2000, 11.0, 12.0, 13.0, 10.0, 20.0],
        [1000, 10.0, 11.0, 12.0, 9.0, 10.0],
    ]

    def _fake_get(url, params=None, timeout=None):
        calls.append({"url": url, "params": params, "timeout": timeout})
        return _FakeResponse(rows)

    monkeypatch.setattr(client_mod.requests, "get", _fake_get)
    candles = BitfinexFetcher(timeframe="1D", limit=3).fetch("BTCUSD")

    assert calls == [
        {
            "url": "https://api-pub.bitfinex.com/v2/candles/trade:1D:tBTCUSD/hist",
            "params": {"limit": 3},
            "timeout": 10.0,
        }
    ]
    assert [c.ts for c in candles] == [1000, 2000, 3000]
    assert candles[0] == Candle(ts=1000, open=10.0, high=12.0, low=9.0, close=11.0, volume=10.0)


@pytest.mark.parametrize(
    "response",
    [
        _FakeResponse([], status_code=500),
        _FakeResponse(ValueError("not json")),
        _FakeResponse({"error": "ratelimit"}),
        _FakeResponse([[1000, 1.0]]),
    ],
)
def test_bitfinex_bad_responses_raise_fetch_failure(monkeypatch, response):
    monkeypatch.setattr(client_mod.requests, "get", lambda *a, **k: response)
    with pytest.raises(FetchFailure):
        BitfinexFetcher().fetch("BTCUSD")


def test_bitfinex_network_error_raises_fetch_failure(monkeypatch):
    def _boom(*_a, **_k):
        raise requests.ConnectionError("offline")

    monkeypatch.setattr(client_mod.requests, "get", _boom)
    with pytest.raises(FetchFailure) as exc:
        BitfinexFetcher().fetch("ETHUSD")
    assert "ETHUSD" in str(exc.value)


def test_ccxt_fetch_uses_client():
    client = _FakeCcxtClient(rows=[[1000, 1, 2, 0.5, 1.5, 10], [2000, 1.5, 2.5, 1, 2, None]])
    fetcher = CcxtFetcher(exchange="binance", timeframe="4h", limit=2, client=client)
    candles = fetcher.fetch("BTC/USDT")
    assert client.calls == [("BTC/USDT", "4h", 2)]
    assert [c.close for c in candles] == [1.5, 2.0]
    assert candles[1].volume == 0.0


def test_ccxt_errors_raise_fetch_failure():
    fetcher = CcxtFetcher(client=_FakeCcxtClient(exc=ccxt.NetworkError("timeout")))
    with pytest.raises(FetchFailure):
        fetcher.fetch("BTC/USDT")


def test_ccxt_unknown_exchange():
    with pytest.raises(ValueError):
        CcxtFetcher(exchange="no_such_exchange")


def test_static_fetcher(make_candles):
    fetcher = StaticFetcher()
    with pytest.raises(FetchFailure):
        fetcher.fetch("BTCUSD")
    fetcher.set("BTCUSD", make_candles([1.0, 2.0]))
    assert [c.close for c in fetcher.fetch("BTCUSD")] == [1.0, 2.0]


def test_ensure_ordered_rejects_duplicates(make_candles):
    candles = make_candles([1.0, 2.0, 3.0])
    assert ensure_ordered("BTCUSD", candles) == candles
    with pytest.raises(FetchFailure):
        ensure_ordered("BTCUSD", [candles[0], candles[0]])
    with pytest.raises(FetchFailure):
        ensure_ordered("BTCUSD", [candles[1], candles[0]])


def test_csv_fetcher_sorts_and_normalizes_seconds(tmp_path):
    (tmp_path / "BTCUSD.csv").write_text(
        "ts,open,high,low,close,volume\n"
        "1700000060,2,3,1,2.5,5\n"
        "1700000000,1,2,0.5,1.5,4\n"
        "1700000120,3,4,2,3.5,6\n"
    )
    fetcher = CsvFetcher(data_dir=str(tmp_path), limit=2)
    candles = fetcher.fetch("BTC/USD")
    assert [c.ts for c in candles] == [1_700_000_060_000, 1_700_000_120_000]
    assert [c.close for c in candles] == [2.5, 3.5]


def test_csv_fetcher_missing_or_invalid_file(tmp_path):
    fetcher = CsvFetcher(data_dir=str(tmp_path))
    with pytest.raises(FetchFailure):
        fetcher.fetch("BTCUSD")
    (tmp_path / "ETHUSD.csv").write_text("ts,close\n1700000000,1.0\n")
    with pytest.raises(FetchFailure):
        fetcher.fetch("ETHUSD")


def test_load_candles_from_csv_defaults_volume(tmp_path):
    path = tmp_path / "XRPUSD.csv"
    path.write_text("ts,open,high,low,close\n1700000000000,1,2,0.5,1.5\n")
    candles = load_candles_from_csv(path)
    assert candles == [Candle(ts=1_700_000_000_000, open=1.0, high=2.0, low=0.5, close=1.5, volume=0.0)]


def test_frame_to_candles_ignores_extra_columns():
    df = pd.DataFrame(
        {
            "volume": [1.0, 2.0],
            "close": [1.5, 2.5],
            "symbol": ["BTCUSD", "BTCUSD"],
            "ts": [1000, 2000],
            "open": [1.0, 2.0],
            "high": [2.0, 3.0],
            "low": [0.5, 1.5],
        }
    )
    assert frame_to_candles(df) == [
        Candle(ts=1000, open=1.0, high=2.0, low=0.5, close=1.5, volume=1.0),
        Candle(ts=2000, open=2.0, high=3.0, low=1.5, close=2.5, volume=2.0),
    ]
    with pytest.raises(ValueError):
        frame_to_candles(df.drop(columns=["volume"]))


def test_get_fetcher_dispatch(tmp_path):
    assert isinstance(get_fetcher({"type": "bitfinex", "timeframe": "1h"}), BitfinexFetcher)
    csv = get_fetcher({"type": "CSV", "data_dir": str(tmp_path)})
    assert isinstance(csv, CsvFetcher)
    with pytest.raises(ValueError):
        get_fetcher({"type": "kraken-ws"})
    with pytest.raises(ValueError):
        get_fetcher({})
