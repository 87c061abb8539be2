"""Payment Order Repository Interface"""

from abc import ABC, abstractmethod
from typing import Optional
from src.domain.payment_order import PaymentOrder


class PaymentOrderRepository(ABC):
    """
    Repository interface for PaymentOrder persistence

    external_order_id is unique; create() raises IntegrityError when a
    concurrent delivery already inserted the same order.
    """

    @abstractmethod
    async def get_by_external_order_id(
        self, external_order_id: str, for_update: bool = False
    ) -> Optional[PaymentOrder]:
        """
        Retrieve an order by its provider order ID

        Args:
            external_order_id: Payment provider order ID
            for_update: If True, lock the row with SELECT FOR UPDATE

        Returns:
            PaymentOrder if found, None otherwise
        """
        pass

    @abstractmethod
    async def create(self, order: PaymentOrder) -> PaymentOrder:
        """
        Insert a new order and flush it so unique violations surface now

        Raises:
            IntegrityError: If external_order_id already exists
        """
        pass

    @abstractmethod
    async def update(self, order: PaymentOrder) -> None:
        pass
