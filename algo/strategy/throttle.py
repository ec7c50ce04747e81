"""节流与分档下单策略。

每个交易对只保留“最后一次放行”的 Order：
- 首次出现：Buy 以小额放行，Quit 以金额 0 放行；
- Hold：任何状态下都不改状态、不出单；
- Buy/Quit：状态与上次不同、时间戳更新且间隔 >= rest_period 才放行；
  Buy 的间隔 > hold_period 用大额，否则小额；Quit 金额恒为 0。
"""

from __future__ import annotations

import threading
from typing import Mapping

from algo.strategy.base import Strategy
from shared.errors import UnknownPairConfiguration
from shared.models.models import Order, SignalEvent, Status
from shared.utils.logging import setup_logger


class ThrottleStrategy(Strategy):
    """按交易对节流 Buy/Quit 信号，并给 Buy 分配下单金额。

    Parameters
    ----------
    rest_period:
        两次放行之间的最小间隔（毫秒）。
    hold_period:
        Buy 距上次放行超过该间隔（毫秒）时使用大额。
    amounts:
        交易对 -> (small_amount, big_amount)。
    """

    def __init__(
        self,
        rest_period: int,
        hold_period: int,
        amounts: Mapping[str, tuple[float, float]],
        logger=None,
    ):
        if rest_period < 0 or hold_period < 0:
            raise ValueError("rest_period and hold_period must be >= 0")
        checked: dict[str, tuple[float, float]] = {}
        for pair, tiers in amounts.items():
            small, big = (float(v) for v in tiers)
            if small < 0 or big < 0:
                raise ValueError(f"Amounts for {pair} must be >= 0")
            checked[pair] = (small, big)

        self.rest_period = int(rest_period)
        self.hold_period = int(hold_period)
        self.amounts = checked
        self.logger = logger or setup_logger("strategy-throttle")
        self._orders: dict[str, Order] = {}
        self._locks: dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    @property
    def pairs(self) -> list[str]:
        return list(self.amounts)

    def require_pair(self, pair: str) -> tuple[float, float]:
        try:
            return self.amounts[pair]
        except KeyError:
            raise UnknownPairConfiguration(pair) from None

    def last_order(self, pair: str) -> Order | None:
        return self._orders.get(pair)

    def reset(self, pair: str | None = None) -> None:
        if pair is None:
            self._orders.clear()
        else:
            self._orders.pop(pair, None)

    def _lock_for(self, pair: str) -> threading.Lock:
        with self._locks_guard:
            lock = self._locks.get(pair)
            if lock is None:
                lock = self._locks[pair] = threading.Lock()
            return lock

    def decide(self, event: SignalEvent) -> Order | None:
        small_amount, big_amount = self.require_pair(event.pair)
        # Hold 在任何状态下都不改状态、不出单
        if event.status is Status.HOLD:
            return None

        with self._lock_for(event.pair):
            last = self._orders.get(event.pair)
            if last is None:
                amount = small_amount if event.status is Status.BUY else 0.0
                return self._admit(event, amount, elapsed=None)

            elapsed = event.ts - last.ts
            # 同一时间戳至多放行一次，rest_period=0 时也成立
            if event.status is last.status or elapsed <= 0 or elapsed < self.rest_period:
                self.logger.debug(
                    "Throttled %s %s (last=%s, elapsed=%sms, rest=%sms)",
                    event.pair,
                    event.status.value,
                    last.status.value,
                    elapsed,
                    self.rest_period,
                )
                return None

            if event.status is Status.BUY:
                amount = big_amount if elapsed > self.hold_period else small_amount
            else:
                amount = 0.0
            return self._admit(event, amount, elapsed=elapsed)

    def _admit(self, event: SignalEvent, amount: float, *, elapsed: int | None) -> Order:
        order = Order(event=event, amount=amount)
        self._orders[event.pair] = order
        self.logger.info(
            "Admitted %s %s amount=%s elapsed=%s",
            event.pair,
            event.status.value,
            amount,
            "first" if elapsed is None else f"{elapsed}ms",
        )
        return order
