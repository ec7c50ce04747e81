"""轮询主循环（WatchEngine）。

配置 → Watcher（分析器/策略/行情源/推送）→ 按 interval_secs 重复 watch()。
配置错误在进入循环前抛出（启动即失败）；单个周期的失败只记录，
由下一个周期自然重试。
"""

from __future__ import annotations

import time
from typing import Any, Callable

from algo.signals.macd import MacdAnalyzer
from algo.strategy.registry import build_strategy
from engine.base_engine import BaseEngine, EngineResult
from engine.watcher import Watcher, WatchReport
from executor.registry import build_executor
from market_data.client import get_fetcher
from shared.config.config_loader import MainConfig, load_config
from shared.errors import WatchCycleError
from shared.utils.logging import setup_logger


def build_watcher(cfg: MainConfig, *, clock: Callable[[], int] | None = None, logger=None) -> Watcher:
    """根据配置组装 Watcher。"""
    analyzer = MacdAnalyzer(fast=cfg.indicator.fast, slow=cfg.indicator.slow, signal=cfg.indicator.signal)
    strategy = build_strategy(cfg.strategy)
    watcher = Watcher(analyzer, strategy, clock=clock, fail_fast=cfg.fail_fast, logger=logger)
    for key, actor_cfg in cfg.actors.items():
        watcher.add_fetcher(key, get_fetcher(actor_cfg.fetcher))
        for pair in actor_cfg.pairs:
            watcher.add_pair(key, pair)
        for executor_cfg in actor_cfg.executors:
            watcher.add_executor(key, build_executor(executor_cfg))
    return watcher


class WatchEngine(BaseEngine):
    def __init__(
        self,
        *,
        cfg_path: str = "config/config.yml",
        cfg_obj: MainConfig | None = None,
        max_cycles: int | None = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], int] | None = None,
    ):
        self._cfg_path = cfg_path
        self._cfg_obj = cfg_obj
        self._max_cycles = max_cycles
        self._sleep = sleep
        self._clock = clock

        self.cfg: MainConfig | None = None
        self.watcher: Watcher | None = None
        self.last_report: WatchReport | None = None
        self.orders_total = 0

    def _load_cfg(self) -> MainConfig:
        return self._cfg_obj or load_config(self._cfg_path)

    def setup(self) -> Watcher:
        if self.watcher is None:
            self.cfg = self._load_cfg()
            self.watcher = build_watcher(self.cfg, clock=self._clock)
        return self.watcher

    def run_once(self) -> WatchReport:
        watcher = self.setup()
        try:
            report = watcher.watch()
        except WatchCycleError as exc:
            if exc.report is not None:
                self._record(exc.report)
            raise
        self._record(report)
        return report

    def _record(self, report: WatchReport) -> None:
        self.last_report = report
        self.orders_total += len(report.orders)

    def run(self) -> EngineResult:
        logger = setup_logger("engine")
        watcher = self.setup()
        assert self.cfg is not None
        logger.info(
            "Watching %s actor(s), %s pair(s), every %ss",
            len(watcher.actors),
            sum(len(a.pairs) for a in watcher.actors.values()),
            self.cfg.interval_secs,
        )

        def _on_error(exc: Exception) -> None:
            if isinstance(exc, WatchCycleError):
                logger.warning("Cycle finished with %s failed pair(s), retry next tick.", len(exc.failures))
            else:
                logger.warning("Cycle aborted: %r, retry next tick.", exc)

        cycles, failed = self.run_cycles(
            run_once=self.run_once,
            interval_secs=self.cfg.interval_secs,
            max_cycles=self._max_cycles,
            sleep=self._sleep,
            on_error=_on_error,
        )
        logger.info("Stopped after %s cycle(s), %s failed.", cycles, failed)
        return EngineResult(summary=self._build_summary(cycles, failed))

    def _build_summary(self, cycles: int, failed: int) -> dict[str, Any]:
        last_orders: dict[str, dict[str, Any]] = {}
        strategy = self.watcher.strategy if self.watcher is not None else None
        last_order = getattr(strategy, "last_order", None)
        if last_order is not None and self.watcher is not None:
            for actor in self.watcher.actors.values():
                for pair in actor.pairs:
                    order = last_order(pair)
                    if order is not None:
                        last_orders[pair] = {"status": order.status.value, "amount": order.amount, "ts": order.ts}
        return {
            "cycles": cycles,
            "failed_cycles": failed,
            "orders": self.orders_total,
            "last_orders": last_orders,
        }
