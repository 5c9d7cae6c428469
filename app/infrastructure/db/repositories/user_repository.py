import itertools
import logging
from typing import Any, Dict, Optional

from ....core.exceptions import ConflictError
from ....domain.entities.user_entity import User
from ....domain.repositories.user_repository import UserRepositoryInterface

logger = logging.getLogger(__name__)


class InMemoryUserRepository(UserRepositoryInterface):
    """Users keyed by sequential id with a case-insensitive email index."""

    def __init__(self):
        self._users: Dict[int, User] = {}
        self._by_email: Dict[str, int] = {}
        self._ids = itertools.count(1)

    async def create(self, data: Dict[str, Any]) -> User:
        email = data["email"].strip().lower()
        if email in self._by_email:
            raise ConflictError(message="User already exists", resource="user", details={"email": email})

        user = User(id=next(self._ids), **{**data, "email": email})
        self._users[user.id] = user
        self._by_email[email] = user.id

        logger.info(f"User created: id={user.id} role={user.role}")
        return user

    async def get(self, user_id: int) -> Optional[User]:
        return self._users.get(user_id)

    async def get_by_email(self, email: str) -> Optional[User]:
        user_id = self._by_email.get(email.strip().lower())
        return self._users.get(user_id) if user_id is not None else None
