from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import JWTError, jwt
from passlib.context import CryptContext
from pydantic import BaseModel

from .config import get_settings
from .exceptions import UnauthorizedError


# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


class TokenData(BaseModel):
    """Token data model."""

    sub: Optional[str] = None
    role: Optional[str] = None
    token_type: str = "access"
    exp: Optional[datetime] = None
    iat: Optional[datetime] = None


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(
    data: Dict[str, Any],
    expires_delta: Optional[timedelta] = None,
) -> str:
    """
    Create a JWT access token.

    Args:
        data: Data to encode in the token
        expires_delta: Custom expiration time

    Returns:
        Encoded JWT token
    """
    settings = get_settings()
    to_encode = data.copy()

    now = datetime.now(timezone.utc)
    if expires_delta:
        expire = now + expires_delta
    else:
        expire = now + timedelta(minutes=settings.security.access_token_expire)

    to_encode.update({
        "exp": expire,
        "iat": now,
        "token_type": "access",
    })

    # Ensure 'sub' claim is present
    if "sub" not in to_encode and "user_id" in to_encode:
        to_encode["sub"] = str(to_encode["user_id"])

    return jwt.encode(
        to_encode,
        settings.security.secret_key,
        algorithm=settings.security.algorithm
    )


def verify_token(token: str, token_type: str = "access") -> TokenData:
    """
    Verify and decode a JWT token.

    Raises:
        UnauthorizedError: If token is invalid or expired
    """
    settings = get_settings()
    try:
        payload = jwt.decode(
            token,
            settings.security.secret_key,
            algorithms=[settings.security.algorithm]
        )
    except JWTError as e:
        raise UnauthorizedError(details={"reason": str(e)}) from e

    if payload.get("token_type") != token_type:
        raise UnauthorizedError(
            message=f"Invalid token type. Expected {token_type}",
            details={"expected_type": token_type, "actual_type": payload.get("token_type")}
        )

    if payload.get("sub") is None:
        raise UnauthorizedError(message="Token is missing the subject claim")

    return TokenData(**payload)
