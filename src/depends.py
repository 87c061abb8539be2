from typing import AsyncIterator
from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.services.notification_service import NotificationService
from src.app.services.payment_provider import PaymentProvider


def build_engine(db_uri: str) -> AsyncEngine:
    return create_async_engine(db_uri, echo=False, future=True)


def build_session_factory(engine: AsyncEngine) -> sessionmaker:
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


async def get_session(request: Request) -> AsyncIterator[AsyncSession]:
    async with request.app.state.session_factory() as session:
        yield session


def get_config(request: Request):
    return request.app.state.config


def get_payment_provider(request: Request) -> PaymentProvider:
    return request.app.state.payment_provider


def get_notification_service(request: Request) -> NotificationService:
    return request.app.state.notification_service
