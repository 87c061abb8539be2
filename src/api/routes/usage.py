"""Usage API Routes

Quota gate endpoints for the chat service: admission before an AI call and
settlement after it.
"""

from fastapi import APIRouter, Depends, status
from sqlmodel.ext.asyncio.session import AsyncSession

from libs.result import Error
from src.api.schemas.credits_request import UsageCheckRequestSchema, UsageSettleRequestSchema
from src.app.errors import ErrorCode
from src.app.use_cases.credits.dtos import (
    AdmissionDTO,
    PrincipalDTO,
    RelatedEntity,
    SettlementDTO,
)
from src.app.use_cases.credits.deduct_credit import DeductCredit
from src.app.use_cases.credits.quota_gate import QuotaGate
from src.adapter.repositories.credit_account_repository import SqlAlchemyCreditAccountRepository
from src.adapter.repositories.credit_transaction_repository import SqlAlchemyCreditTransactionRepository
from src.adapter.repositories.user_repository import SqlAlchemyUserRepository
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.depends import get_session, get_config
from src.api.error import ClientError

router = APIRouter(prefix="/billing/usage", tags=["Usage"])


def _build_quota_gate(session: AsyncSession, config) -> QuotaGate:
    uow = SqlAlchemyUnitOfWork(session)
    account_repo = SqlAlchemyCreditAccountRepository(session)
    transaction_repo = SqlAlchemyCreditTransactionRepository(session)
    user_repo = SqlAlchemyUserRepository(session)

    deduct_credit = DeductCredit(uow, account_repo, transaction_repo)
    return QuotaGate(
        uow,
        account_repo,
        user_repo,
        deduct_credit,
        owner_unlimited=config.OWNER_UNLIMITED,
        action_timeout=config.QUOTA_ACTION_TIMEOUT_SECONDS,
    )


@router.post(
    "/check",
    response_model=AdmissionDTO,
    status_code=status.HTTP_200_OK,
    responses={
        402: {
            "description": "No credits remaining",
            "content": {
                "application/json": {
                    "example": {
                        "error": {
                            "code": "PAYMENT_REQUIRED",
                            "message": "No AI credits remaining. Purchase more credits to continue.",
                            "details": {"balance": 0}
                        }
                    }
                }
            }
        }
    }
)
async def check_usage(
    request: UsageCheckRequestSchema,
    session: AsyncSession = Depends(get_session),
    config=Depends(get_config),
):
    """
    Admission check before a metered AI call.

    Nothing is reserved: the credit is only debited by /settle once the call
    has succeeded.

    **Returns:**
    - 200: Caller may proceed (`unlimited` set for owners and entitled users)
    - 402: Balance below one credit
    """
    quota_gate = _build_quota_gate(session, config)
    result = await quota_gate.check_and_reserve(
        PrincipalDTO(user_id=request.user_id, role=request.role)
    )

    if result.is_err():
        raise ClientError(result.error)

    admission = result.value
    if not admission.allowed:
        raise ClientError(
            Error(
                code=ErrorCode.PAYMENT_REQUIRED,
                message="No AI credits remaining. Purchase more credits to continue.",
                details={"balance": admission.balance},
            )
        )

    return admission


@router.post(
    "/settle",
    response_model=SettlementDTO,
    status_code=status.HTTP_200_OK,
)
async def settle_usage(
    request: UsageSettleRequestSchema,
    session: AsyncSession = Depends(get_session),
    config=Depends(get_config),
):
    """
    Settle a metered AI call.

    `outcome=success` debits one credit; `outcome=failure` debits nothing.
    A debit that fails after delivery is reported in `warning`, never as an
    error status.
    """
    related_entity = None
    if request.related_entity_type and request.related_entity_id:
        related_entity = RelatedEntity(
            type=request.related_entity_type, id=request.related_entity_id
        )

    quota_gate = _build_quota_gate(session, config)
    result = await quota_gate.settle(
        PrincipalDTO(user_id=request.user_id, role=request.role),
        request.outcome,
        description=request.description,
        related_entity=related_entity,
    )

    if result.is_err():
        raise ClientError(result.error)

    return result.value
