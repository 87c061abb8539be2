"""SQLAlchemy implementation of UnmatchedPaymentEventRepository"""

from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.unmatched_payment_event_repository import UnmatchedPaymentEventRepository
from src.domain.unmatched_payment_event import UnmatchedPaymentEvent


class SqlAlchemyUnmatchedPaymentEventRepository(UnmatchedPaymentEventRepository):

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, event: UnmatchedPaymentEvent) -> UnmatchedPaymentEvent:
        self.session.add(event)
        await self.session.flush()
        return event
