"""Quota Gate

Check-then-consume wrapper around a metered, non-transactional action
(one AI chat exchange).

The debit deliberately happens after the action succeeds, outside the
action's own execution. A concurrent request can therefore drain the balance
between admission and debit; in that case the delivered result is kept and
the failed debit is logged. The LLM call has already cost the operator money
and cannot be undone, so rare under-billing is accepted over billing for a
result that was never delivered.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Optional, TypeVar
from sqlalchemy.exc import SQLAlchemyError
from libs.result import Result, Return, Error
from src.app.errors import ErrorCode
from src.app.services.unit_of_work import UnitOfWork
from src.app.repositories.credit_account_repository import CreditAccountRepository
from src.app.repositories.user_repository import UserRepository
from .deduct_credit import DeductCredit, USAGE_COST
from .dtos import (
    AdmissionDTO,
    DeductCreditCommandDTO,
    PrincipalDTO,
    RelatedEntity,
    SettleOutcome,
    SettlementDTO,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_ACTION_TIMEOUT_SECONDS = 60.0


class QuotaGate:
    """
    Quota gate for metered actions

    Protocol:
    1. Admission: unlocked balance read; reject with PAYMENT_REQUIRED if < 1
    2. Perform the action (bounded by a timeout; timeout = failure)
    3. On success: DeductCredit; a late failure is logged, not raised
    4. On failure: no debit

    Unlimited principals (owner role when owner_unlimited is set, or an
    active ai_access_until entitlement) skip steps 1 and 3.
    """

    def __init__(
        self,
        uow: UnitOfWork,
        account_repo: CreditAccountRepository,
        user_repo: UserRepository,
        deduct_credit: DeductCredit,
        owner_unlimited: bool = True,
        action_timeout: float = DEFAULT_ACTION_TIMEOUT_SECONDS,
    ):
        self.uow = uow
        self.account_repo = account_repo
        self.user_repo = user_repo
        self.deduct_credit = deduct_credit
        self.owner_unlimited = owner_unlimited
        self.action_timeout = action_timeout

    async def check_and_reserve(self, principal: PrincipalDTO) -> Result[AdmissionDTO]:
        """
        Admission check (no lock, nothing reserved in storage)

        Returns:
            Result[AdmissionDTO]: allowed=False when the balance is below the
            usage cost; STORAGE_ERROR if the read fails
        """
        try:
            if await self._is_unlimited(principal):
                return Return.ok(AdmissionDTO(allowed=True, balance=None, unlimited=True))

            account = await self.account_repo.get_or_create(principal.user_id)
            await self.uow.commit()

        except SQLAlchemyError as e:
            await self.uow.rollback()
            logger.error(f"Admission check failed for user {principal.user_id}: {e}")
            return Return.err(
                Error(
                    code=ErrorCode.STORAGE_ERROR,
                    message="Failed to read credit balance",
                    reason=str(e),
                )
            )

        return Return.ok(
            AdmissionDTO(allowed=account.balance >= USAGE_COST, balance=account.balance)
        )

    async def settle(
        self,
        principal: PrincipalDTO,
        outcome: SettleOutcome,
        description: str = "AI chat message",
        related_entity: Optional[RelatedEntity] = None,
    ) -> Result[SettlementDTO]:
        """
        Settle a metered action after it ran

        Never returns an error: a debit that fails after the action succeeded
        is downgraded to a warning on the settlement.
        """
        if outcome == SettleOutcome.FAILURE:
            return Return.ok(SettlementDTO(charged=False))

        try:
            unlimited = await self._is_unlimited(principal)
        except SQLAlchemyError as e:
            logger.warning(
                f"Could not settle delivered action for user {principal.user_id}: {e}"
            )
            return Return.ok(
                SettlementDTO(charged=False, warning="Credit usage could not be recorded")
            )

        if unlimited:
            logger.info(
                f"Unlimited user {principal.user_id}: '{description}' "
                f"would have cost {USAGE_COST} credit"
            )
            return Return.ok(SettlementDTO(charged=False))

        result = await self.deduct_credit.execute(
            DeductCreditCommandDTO(
                user_id=principal.user_id,
                description=description,
                related_entity=related_entity,
            )
        )

        if result.is_err():
            # Race: credit was available at admission but not at deduction.
            # The result was already delivered, so log and keep it.
            logger.warning(
                f"Credit deduction failed after delivered action for user "
                f"{principal.user_id} ({result.error.code}): {result.error.reason}"
            )
            balance = (result.error.details or {}).get("balance")
            return Return.ok(
                SettlementDTO(charged=False, balance=balance, warning=result.error.message)
            )

        return Return.ok(SettlementDTO(charged=True, balance=result.value.balance_after))

    async def run(
        self,
        principal: PrincipalDTO,
        action: Callable[[], Awaitable[T]],
        description: str = "AI chat message",
        related_entity: Optional[RelatedEntity] = None,
    ) -> Result[tuple[T, SettlementDTO]]:
        """
        Run a metered action through the full admission/settle protocol

        Args:
            principal: Authenticated caller
            action: Zero-argument coroutine function performing the paid call
            description: Ledger description for the debit
            related_entity: Entity to attach to the debit

        Returns:
            Result with (action output, settlement) on success;
            PAYMENT_REQUIRED, ACTION_TIMEOUT or STORAGE_ERROR otherwise

        Raises:
            Any exception raised by the action itself (nothing is debited)
        """
        admission = await self.check_and_reserve(principal)
        if admission.is_err():
            return admission

        if not admission.value.allowed:
            return Return.err(
                Error(
                    code=ErrorCode.PAYMENT_REQUIRED,
                    message="No AI credits remaining. Purchase more credits to continue.",
                    reason=f"balance={admission.value.balance}",
                    details={"balance": admission.value.balance},
                )
            )

        try:
            output = await asyncio.wait_for(action(), timeout=self.action_timeout)
        except asyncio.TimeoutError:
            logger.warning(
                f"Metered action '{description}' for user {principal.user_id} "
                f"timed out after {self.action_timeout}s, no credit deducted"
            )
            return Return.err(
                Error(
                    code=ErrorCode.ACTION_TIMEOUT,
                    message="The AI service did not respond in time. No credit was used.",
                    reason=f"timeout={self.action_timeout}s",
                )
            )
        except Exception:
            logger.exception(
                f"Metered action '{description}' failed for user {principal.user_id}, "
                f"no credit deducted"
            )
            raise

        settlement = await self.settle(
            principal, SettleOutcome.SUCCESS, description, related_entity
        )
        return Return.ok((output, settlement.value))

    async def _is_unlimited(self, principal: PrincipalDTO) -> bool:
        if principal.is_owner and self.owner_unlimited:
            return True
        user = await self.user_repo.get_by_id(principal.user_id)
        return user is not None and user.has_ai_access()
