from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from app.core.constants import ADMIN_ROLES
from app.core.enums import UserRole

from .base import utcnow


@dataclass
class User:
    """
    User domain entity.

    Carries the ownership metadata that is copied onto every record
    the user submits.
    """

    id: int
    name: str
    email: str
    employee_id: str
    department: str
    hashed_password: str = ""
    role: UserRole = UserRole.FACULTY
    institute: Optional[str] = None
    created_at: datetime = field(default_factory=utcnow)

    def __post_init__(self):
        self._validate()

    def _validate(self) -> None:
        if not self.name or not self.name.strip():
            raise ValueError("Name cannot be empty")
        if "@" not in self.email:
            raise ValueError("Email address is not valid")

    @property
    def is_admin(self) -> bool:
        return UserRole(self.role).value in ADMIN_ROLES

    def owns(self, record) -> bool:
        return record.user_id == self.id
