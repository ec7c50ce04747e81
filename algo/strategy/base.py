from abc import ABC, abstractmethod

from shared.models.models import Order, SignalEvent


class Strategy(ABC):
    @abstractmethod
    def decide(self, event: SignalEvent) -> Order | None:
        """
        输入一个 SignalEvent，放行时返回 Order，否则返回 None。
        """
        ...
