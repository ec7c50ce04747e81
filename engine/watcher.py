"""Watcher：拉取 → 分析 → 信号 → 策略 → 推送。

注册在启动阶段完成（重复 key / 未知 key / 缺少金额配置立即报错），
`watch()` 跑一个完整周期；周期之间不重叠，由外部调度（`WatchEngine`）驱动。
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Callable, Mapping

from algo.signals.base import Analyzer
from algo.strategy.base import Strategy
from executor.base import Executor
from market_data.client import Fetcher
from shared.errors import DuplicateKey, UnknownKey, WatchCycleError
from shared.models.models import Candle, Order, SignalEvent, now_ms
from shared.utils.logging import setup_logger


@dataclass
class Actor:
    """一个行情源及其跟踪的交易对与推送目标。"""
    fetcher: Fetcher
    pairs: list[str] = field(default_factory=list)
    executors: list[Executor] = field(default_factory=list)


@dataclass(frozen=True)
class PairResult:
    actor: str
    pair: str
    event: SignalEvent
    order: Order | None = None
    candle: Candle | None = None


@dataclass
class WatchReport:
    """一个周期的结果汇总。"""
    results: list[PairResult] = field(default_factory=list)
    failures: list[tuple[str, str, BaseException]] = field(default_factory=list)

    @property
    def orders(self) -> list[Order]:
        return [r.order for r in self.results if r.order is not None]

    @property
    def ok(self) -> bool:
        return not self.failures


class Watcher:
    """驱动所有已注册 actor 的一个评估周期。

    Parameters
    ----------
    analyzer:
        K 线 -> Status 的分析器。
    strategy:
        可选；提供时每个信号先交给策略决定下单金额。
    clock:
        返回毫秒时间戳的函数，默认墙钟。
    fail_fast:
        True：首个失败立即中止本周期并抛出；
        False：记录失败、继续其他交易对，周期结束时抛 WatchCycleError。
    """

    def __init__(
        self,
        analyzer: Analyzer,
        strategy: Strategy | None = None,
        *,
        clock: Callable[[], int] | None = None,
        fail_fast: bool = True,
        logger=None,
    ):
        self.analyzer = analyzer
        self.strategy = strategy
        self.clock = clock or now_ms
        self.fail_fast = fail_fast
        self.logger = logger or setup_logger("watcher")
        self._actors: dict[str, Actor] = {}

    @property
    def actors(self) -> Mapping[str, Actor]:
        return MappingProxyType(self._actors)

    def add_fetcher(self, key: str, fetcher: Fetcher) -> "Watcher":
        if key in self._actors:
            raise DuplicateKey(key)
        self._actors[key] = Actor(fetcher=fetcher)
        return self

    def _actor(self, key: str) -> Actor:
        actor = self._actors.get(key)
        if actor is None:
            raise UnknownKey(key)
        return actor

    def add_pair(self, key: str, pair: str) -> "Watcher":
        actor = self._actor(key)
        require_pair = getattr(self.strategy, "require_pair", None)
        if require_pair is not None:
            require_pair(pair)
        if pair in actor.pairs:
            self.logger.warning("Pair %s already registered under `%s`, ignored.", pair, key)
            return self
        actor.pairs.append(pair)
        return self

    def add_executor(self, key: str, executor: Executor) -> "Watcher":
        self._actor(key).executors.append(executor)
        return self

    def watch(self) -> WatchReport:
        """跑一个完整周期。"""
        report = WatchReport()
        for key, actor in self._actors.items():
            for pair in actor.pairs:
                try:
                    report.results.append(self._watch_pair(key, actor, pair))
                except Exception as exc:
                    self.logger.error("Watch failed for %s/%s: %r", key, pair, exc)
                    if self.fail_fast:
                        raise
                    report.failures.append((key, pair, exc))
        if report.failures:
            raise WatchCycleError(report.failures, report)
        return report

    def _watch_pair(self, key: str, actor: Actor, pair: str) -> PairResult:
        candles = actor.fetcher.fetch(pair)
        status = self.analyzer.analyze(candles)
        event = SignalEvent.now(pair, status, clock=self.clock)

        order = self.strategy.decide(event) if self.strategy is not None else None
        amount = order.amount if order is not None else None
        latest = candles[-1] if candles else None
        self.logger.debug("%s/%s -> %s (order=%s)", key, pair, status.value, amount)

        for executor in actor.executors:
            executor.execute(event, amount, latest)
        return PairResult(actor=key, pair=pair, event=event, order=order, candle=latest)
