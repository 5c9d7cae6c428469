from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.core.enums import RecordKind
from app.core.exceptions import ForbiddenError, UnauthorizedError
from app.core.logging import user_id_ctx
from app.domain.entities.user_entity import User
from app.infrastructure.db import DatabaseManager
from app.infrastructure.export import TabularExportManager
from app.infrastructure.storage import LocalFileStorage
from app.services.auth_service import AuthService
from app.services.record_service import RecordService

# Security
security = HTTPBearer(auto_error=False)


def get_db(request: Request) -> DatabaseManager:
    """Record store created in the application lifespan"""
    return request.app.state.db


def get_export_manager(request: Request) -> TabularExportManager:
    return request.app.state.export_manager


def get_storage(request: Request) -> LocalFileStorage:
    return request.app.state.storage


def get_auth_service(db: DatabaseManager = Depends(get_db)) -> AuthService:
    return AuthService(db.users)


def record_service_dependency(kind: RecordKind):
    """Build a dependency yielding the RecordService for ``kind``"""

    def get_record_service(
        db: DatabaseManager = Depends(get_db),
        exporter: TabularExportManager = Depends(get_export_manager),
        storage: LocalFileStorage = Depends(get_storage),
    ) -> RecordService:
        return RecordService(kind, db.records(kind), exporter, storage)

    return get_record_service


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    auth_service: AuthService = Depends(get_auth_service),
) -> User:
    """Get current authenticated user"""
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise UnauthorizedError()

    user = await auth_service.get_user_from_token(credentials.credentials)
    user_id_ctx.set(user.id)
    return user


async def get_admin_user(
    current_user: User = Depends(get_current_user)
) -> User:
    """Get current admin user"""
    if not current_user.is_admin:
        raise ForbiddenError(message=f"User role {current_user.role.value} is not authorized to access this route")
    return current_user
