"""
Service layer: authentication and incentive-record business logic.
"""

from .base import BaseService
from .auth_service import AuthService
from .record_service import RecordService

__all__ = [
    "BaseService",
    "AuthService",
    "RecordService",
]
