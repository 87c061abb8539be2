"""InitTrialCredits Use Case

Grants the welcome bonus to a newly created user.
"""

from libs.result import Result
from src.domain.credit_transaction import TransactionKind
from .add_credits import AddCredits
from .dtos import AddCreditsCommandDTO, CreditMutationResponseDTO

DEFAULT_TRIAL_CREDITS = 25


class InitTrialCredits:
    """
    Use Case: Grant trial credits

    Invoked once, when the user account is created. Not guarded against
    repeated calls; the sign-up flow is responsible for calling it once.
    """

    def __init__(self, add_credits: AddCredits, trial_amount: int = DEFAULT_TRIAL_CREDITS):
        self.add_credits = add_credits
        self.trial_amount = trial_amount

    async def execute(self, user_id: int) -> Result[CreditMutationResponseDTO]:
        return await self.add_credits.execute(
            AddCreditsCommandDTO(
                user_id=user_id,
                amount=self.trial_amount,
                kind=TransactionKind.TRIAL,
                description=f"Welcome bonus: {self.trial_amount} free AI coaching credits",
            )
        )
