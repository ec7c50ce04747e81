"""日志推送（dry-run 用）。

不触网，只把每个信号写进日志。
"""

from executor.base import STATUS_LABELS, Executor
from shared.models.models import Candle, SignalEvent
from shared.utils.logging import setup_logger


class LogExecutor(Executor):
    """把信号写入日志；`only_orders=True` 时只记录策略放行的订单。"""

    def __init__(self, only_orders: bool = False, logger=None):
        self.only_orders = only_orders
        self.logger = logger or setup_logger("executor-log")

    def execute(self, event: SignalEvent, amount: float | None = None, candle: Candle | None = None) -> dict:
        if self.only_orders and amount is None:
            return {"status": "skipped", "pair": event.pair, "reason": "no_order"}
        price = candle.price if candle is not None else None
        self.logger.info(
            "[SIGNAL] %s %s ts=%s amount=%s price=%s",
            STATUS_LABELS[event.status].upper(),
            event.pair,
            event.ts,
            amount,
            price,
        )
        return {
            "status": "logged",
            "pair": event.pair,
            "signal": event.status.value,
            "ts": event.ts,
            "amount": amount,
            "price": price,
        }
