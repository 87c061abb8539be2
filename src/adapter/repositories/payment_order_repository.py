"""SQLAlchemy implementation of PaymentOrderRepository"""

from typing import Optional
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.payment_order_repository import PaymentOrderRepository
from src.domain.payment_order import PaymentOrder


class SqlAlchemyPaymentOrderRepository(PaymentOrderRepository):
    """
    SQLAlchemy implementation of PaymentOrderRepository

    The unique index on external_order_id is the storage-level guard against
    a webhook being applied twice.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_external_order_id(
        self, external_order_id: str, for_update: bool = False
    ) -> Optional[PaymentOrder]:
        stmt = select(PaymentOrder).where(PaymentOrder.external_order_id == external_order_id)

        if for_update:
            stmt = stmt.with_for_update().execution_options(populate_existing=True)

        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def create(self, order: PaymentOrder) -> PaymentOrder:
        """
        Insert a new order

        Raises:
            IntegrityError: If external_order_id already exists
        """
        self.session.add(order)
        await self.session.flush()
        await self.session.refresh(order)
        return order

    async def update(self, order: PaymentOrder) -> None:
        self.session.add(order)
        await self.session.flush()
