"""User Repository Interface"""

from abc import ABC, abstractmethod
from typing import Optional
from src.domain.user import User


class UserRepository(ABC):

    @abstractmethod
    async def get_by_id(self, user_id: int, for_update: bool = False) -> Optional[User]:
        """
        Retrieve a user by ID

        Args:
            user_id: User ID
            for_update: If True, lock the row with SELECT FOR UPDATE

        Returns:
            User if found, None otherwise
        """
        pass

    @abstractmethod
    async def update(self, user: User) -> None:
        pass
