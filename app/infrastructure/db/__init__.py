from .connection import DatabaseManager
from .repositories import InMemoryRecordRepository, InMemoryUserRepository

__all__ = [
    "DatabaseManager",
    "InMemoryRecordRepository",
    "InMemoryUserRepository",
]
