"""
Authentication service for user registration and login.
"""

from typing import Optional

from app.core.config import get_settings
from app.core.exceptions import UnauthorizedError
from app.core.security import create_access_token, get_password_hash, verify_password, verify_token
from app.domain.entities.user_entity import User
from app.domain.repositories.user_repository import UserRepositoryInterface
from app.schemas.auth import AuthResult, LoginRequest, RegisterRequest, Token, UserRead
from app.services.base import BaseService


class AuthService(BaseService):
    """Service for handling authentication operations."""

    def __init__(self, users: UserRepositoryInterface):
        super().__init__()
        self.users = users

    def get_service_name(self) -> str:
        return "AuthService"

    async def register(self, payload: RegisterRequest) -> AuthResult:
        """Create a user and issue a token for it."""
        self.log_operation("register", {"email": payload.email, "role": payload.role.value})
        data = payload.model_dump(exclude={"password"})
        data["hashed_password"] = get_password_hash(payload.password)
        user = await self.users.create(data)
        return self._auth_result(user)

    async def login(self, payload: LoginRequest) -> AuthResult:
        self.log_operation("login", {"email": payload.email})
        user = await self.authenticate_user(payload.email, payload.password)
        if user is None:
            raise UnauthorizedError(message="Invalid credentials")
        return self._auth_result(user)

    async def authenticate_user(self, email: str, password: str) -> Optional[User]:
        user = await self.users.get_by_email(email)
        if user is None or not verify_password(password, user.hashed_password):
            return None
        return user

    async def get_user_from_token(self, token: str) -> User:
        token_data = verify_token(token)
        try:
            user_id = int(token_data.sub)
        except (TypeError, ValueError):
            raise UnauthorizedError(message="Token subject is not a user id")

        user = await self.users.get(user_id)
        if user is None:
            raise UnauthorizedError(message="User not found")
        return user

    def _auth_result(self, user: User) -> AuthResult:
        settings = get_settings()
        token = create_access_token({"sub": str(user.id), "role": user.role.value})
        return AuthResult(
            token=Token(access_token=token, expires_in=settings.security.access_token_expire * 60),
            user=UserRead.model_validate(user),
        )
