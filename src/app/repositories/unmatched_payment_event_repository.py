"""Unmatched Payment Event Repository Interface"""

from abc import ABC, abstractmethod
from src.domain.unmatched_payment_event import UnmatchedPaymentEvent


class UnmatchedPaymentEventRepository(ABC):

    @abstractmethod
    async def create(self, event: UnmatchedPaymentEvent) -> UnmatchedPaymentEvent:
        pass
