from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from ..entities.user_entity import User


class UserRepositoryInterface(ABC):
    """
    User repository interface.

    Defines the contract for user data persistence.
    """

    @abstractmethod
    async def create(self, data: Dict[str, Any]) -> User:
        """
        Create a new user.

        Args:
            data: User fields, password already hashed

        Returns:
            Created user entity
        """
        pass

    @abstractmethod
    async def get(self, user_id: int) -> Optional[User]:
        """
        Get user by ID.

        Args:
            user_id: User ID

        Returns:
            User entity or None if not found
        """
        pass

    @abstractmethod
    async def get_by_email(self, email: str) -> Optional[User]:
        """
        Get user by email address.

        Args:
            email: Email address

        Returns:
            User entity or None if not found
        """
        pass
