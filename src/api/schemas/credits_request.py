"""Request schemas for Credits and Usage APIs

Pydantic models for validating incoming HTTP requests.
"""

from typing import Optional
from pydantic import BaseModel, Field
from src.app.use_cases.credits.dtos import SettleOutcome


class TrialCreditsRequestSchema(BaseModel):
    """
    Request schema for granting trial credits

    Used for POST /billing/credits/trial endpoint (called once at sign-up).
    """

    user_id: int = Field(..., gt=0, description="Newly registered user ID")

    class Config:
        json_schema_extra = {"example": {"user_id": 42}}


class UsageCheckRequestSchema(BaseModel):
    """
    Request schema for the quota admission check

    Used for POST /billing/usage/check endpoint.
    """

    user_id: int = Field(..., gt=0, description="Authenticated caller user ID")
    role: str = Field(default="member", description="Caller platform role")

    class Config:
        json_schema_extra = {"example": {"user_id": 42, "role": "member"}}


class UsageSettleRequestSchema(BaseModel):
    """
    Request schema for settling a metered action

    Used for POST /billing/usage/settle endpoint.
    """

    user_id: int = Field(..., gt=0, description="Authenticated caller user ID")
    role: str = Field(default="member", description="Caller platform role")
    outcome: SettleOutcome = Field(..., description="Whether the metered action succeeded")
    description: str = Field(
        default="AI chat message",
        min_length=1,
        max_length=255,
        description="Ledger description for the debit"
    )
    related_entity_type: Optional[str] = Field(default=None, max_length=50)
    related_entity_id: Optional[str] = Field(default=None, max_length=255)

    class Config:
        json_schema_extra = {
            "example": {
                "user_id": 42,
                "role": "member",
                "outcome": "success",
                "description": "AI chat message",
                "related_entity_type": "chat_session",
                "related_entity_id": "17"
            }
        }
