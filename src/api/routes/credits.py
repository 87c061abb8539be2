"""Credits API Routes

FastAPI routes for reading balances and history and for granting trial credits.
"""

from fastapi import APIRouter, Depends, Query, status
from sqlmodel.ext.asyncio.session import AsyncSession

from src.api.schemas.credits_request import TrialCreditsRequestSchema
from src.app.use_cases.credits.dtos import (
    BalanceResponseDTO,
    CreditMutationResponseDTO,
    ListTransactionsResponseDTO,
)
from src.app.use_cases.credits.add_credits import AddCredits
from src.app.use_cases.credits.get_balance import GetBalance
from src.app.use_cases.credits.init_trial_credits import InitTrialCredits
from src.app.use_cases.credits.list_transactions import ListTransactions, DEFAULT_PAGE_SIZE
from src.adapter.repositories.credit_account_repository import SqlAlchemyCreditAccountRepository
from src.adapter.repositories.credit_transaction_repository import SqlAlchemyCreditTransactionRepository
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.depends import get_session, get_config
from src.api.error import ClientError

router = APIRouter(prefix="/billing/credits", tags=["Credits"])


@router.get(
    "/balance/{user_id}",
    response_model=BalanceResponseDTO,
    status_code=status.HTTP_200_OK,
)
async def get_balance(
    user_id: int,
    session: AsyncSession = Depends(get_session),
):
    """
    Get a user's credit balance.

    Users without an account get a zero-balance one on first read.

    **Returns:**
    - 200: Balance and lifetime counters
    - 503: Storage unavailable
    """
    uow = SqlAlchemyUnitOfWork(session)
    account_repo = SqlAlchemyCreditAccountRepository(session)

    use_case = GetBalance(uow, account_repo)
    result = await use_case.execute(user_id)

    if result.is_err():
        raise ClientError(result.error)

    return result.value


@router.get(
    "/transactions/{user_id}",
    response_model=ListTransactionsResponseDTO,
    status_code=status.HTTP_200_OK,
)
async def list_transactions(
    user_id: int,
    page: int = Query(default=1, ge=1, description="1-based page number"),
    page_size: int = Query(default=DEFAULT_PAGE_SIZE, ge=1, description="Page size (capped)"),
    session: AsyncSession = Depends(get_session),
    config=Depends(get_config),
):
    """
    List a user's credit transactions, most recent first.

    **Query parameters:**
    - `page`: 1-based page number (default 1)
    - `page_size`: rows per page (default 20, capped at TRANSACTIONS_MAX_PAGE_SIZE)
    """
    transaction_repo = SqlAlchemyCreditTransactionRepository(session)

    use_case = ListTransactions(transaction_repo, max_page_size=config.TRANSACTIONS_MAX_PAGE_SIZE)
    result = await use_case.execute(user_id, page=page, page_size=page_size)

    if result.is_err():
        raise ClientError(result.error)

    return result.value


@router.post(
    "/trial",
    response_model=CreditMutationResponseDTO,
    status_code=status.HTTP_201_CREATED,
)
async def grant_trial_credits(
    request: TrialCreditsRequestSchema,
    session: AsyncSession = Depends(get_session),
    config=Depends(get_config),
):
    """
    Grant the sign-up trial credits.

    Called by the registration flow, once per new user.

    **Example request:**
    ```json
    {"user_id": 42}
    ```

    **Returns:**
    - 201: Trial transaction and resulting balance
    - 503: Storage unavailable
    """
    uow = SqlAlchemyUnitOfWork(session)
    account_repo = SqlAlchemyCreditAccountRepository(session)
    transaction_repo = SqlAlchemyCreditTransactionRepository(session)

    add_credits = AddCredits(uow, account_repo, transaction_repo)
    use_case = InitTrialCredits(add_credits, trial_amount=config.TRIAL_CREDITS)
    result = await use_case.execute(request.user_id)

    if result.is_err():
        raise ClientError(result.error)

    return result.value
