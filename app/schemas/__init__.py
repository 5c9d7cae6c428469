from .base import CamelModel, FormModel, validate_payload
from .auth import AuthResult, LoginRequest, RegisterRequest, Token, UserRead
from .records import (
    BookCreate, BookRead, BookUpdate,
    JournalCreate, JournalRead, JournalUpdate,
    ProjectCreate, ProjectRead, ProjectUpdate,
    RECORD_SCHEMAS, schemas_for,
)

__all__ = [
    # Base schemas
    "CamelModel", "FormModel", "validate_payload",

    # Auth schemas
    "AuthResult", "LoginRequest", "RegisterRequest", "Token", "UserRead",

    # Record schemas
    "BookCreate", "BookRead", "BookUpdate",
    "JournalCreate", "JournalRead", "JournalUpdate",
    "ProjectCreate", "ProjectRead", "ProjectUpdate",
    "RECORD_SCHEMAS", "schemas_for",
]
