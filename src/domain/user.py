"""User Domain Entity

Minimal projection of the platform user row. The ledger reads it to resolve
webhook buyers and unlimited principals, and the referral reward writes
ai_access_until.
"""

from datetime import datetime
from typing import Optional
from sqlmodel import Field, Column
from sqlalchemy import String
from src.domain.base import BaseModel, IdType


class User(BaseModel, table=True):
    __tablename__ = "users"

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(IdType, primary_key=True, autoincrement=True),
        description="User ID"
    )

    email: str = Field(
        sa_column=Column(String(255), unique=True, nullable=False),
        description="Login email"
    )

    role: str = Field(
        default="member",
        sa_column=Column(String(20), nullable=False, default="member"),
        description="Platform role (owner, coach, member)"
    )

    ai_access_until: Optional[datetime] = Field(
        default=None,
        description="Unlimited AI access expiry (None = no entitlement)"
    )

    created_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="Sign-up timestamp"
    )

    def has_ai_access(self, now: Optional[datetime] = None) -> bool:
        if self.ai_access_until is None:
            return False
        return self.ai_access_until > (now or datetime.utcnow())
