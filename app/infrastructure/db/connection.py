import logging
from typing import Dict

from ...core.enums import RecordKind
from .repositories import InMemoryRecordRepository, InMemoryUserRepository

logger = logging.getLogger(__name__)


class DatabaseManager:
    """
    Owner of the in-memory repositories.

    One record repository per kind plus the user repository. Contents
    live as long as the manager; ``reset`` starts from empty stores
    with fresh id counters.
    """

    def __init__(self):
        self.users = InMemoryUserRepository()
        self._records: Dict[RecordKind, InMemoryRecordRepository] = {
            kind: InMemoryRecordRepository(kind) for kind in RecordKind
        }
        self._is_connected = False

    def records(self, kind: RecordKind) -> InMemoryRecordRepository:
        return self._records[RecordKind(kind)]

    async def connect(self) -> None:
        self._is_connected = True
        logger.info("In-memory record store ready")

    async def disconnect(self) -> None:
        self._is_connected = False
        logger.info("In-memory record store released")

    def reset(self) -> None:
        self.users = InMemoryUserRepository()
        self._records = {kind: InMemoryRecordRepository(kind) for kind in RecordKind}

    @property
    def is_connected(self) -> bool:
        return self._is_connected

    async def health_check(self) -> Dict[str, int]:
        return {kind.value: await repo.count() for kind, repo in self._records.items()}


