"""
In-memory repositories package.
"""

from .record_repository import InMemoryRecordRepository
from .user_repository import InMemoryUserRepository

__all__ = [
    "InMemoryRecordRepository",
    "InMemoryUserRepository",
]
