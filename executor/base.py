"""推送（执行）抽象接口。"""

from __future__ import annotations

from abc import ABC, abstractmethod

from shared.models.models import Candle, SignalEvent, Status

STATUS_LABELS = {
    Status.BUY: "Buy",
    Status.HOLD: "Hold",
    Status.QUIT: "Quit",
}


class Executor(ABC):
    """信号推送抽象层。

    在策略提交状态之后调用；推送失败只抛 DeliveryFailure，不回滚策略状态。
    """

    @abstractmethod
    def execute(self, event: SignalEvent, amount: float | None = None, candle: Candle | None = None) -> dict:
        """推送一次信号。

        Parameters
        ----------
        event:
            本次分析产生的信号。
        amount:
            策略放行的下单金额；None 表示本周期没有新订单。
        candle:
            最新一根 K 线，用于展示价格。
        """


def render_text(event: SignalEvent, amount: float | None, candle: Candle | None) -> str:
    label = STATUS_LABELS[event.status]
    text = f"*{label}* _{event.pair}_"
    if candle is not None:
        text += f" at {candle.price}"
    if amount:
        text += f" (amount {amount})"
    return text
