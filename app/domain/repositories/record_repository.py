from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from app.core.enums import RecordKind

from ..entities.base import IncentiveRecord


class RecordRepositoryInterface(ABC):
    """
    Record repository interface.

    Defines the contract for persisting one record kind.
    """

    kind: RecordKind

    @abstractmethod
    async def create(self, data: Dict[str, Any]) -> IncentiveRecord:
        """
        Create a new record.

        Args:
            data: Field values, owner metadata included. The id and
                  timestamps are assigned by the repository.

        Returns:
            Created record
        """
        pass

    @abstractmethod
    async def find_by_id(self, record_id: int) -> Optional[IncentiveRecord]:
        pass

    @abstractmethod
    async def find(
        self,
        user_id: Optional[int] = None,
        newest_first: bool = True,
    ) -> List[IncentiveRecord]:
        """
        List records, optionally restricted to one owner.

        Args:
            user_id: Owner filter, None for all records
            newest_first: Sort by created_at descending

        Returns:
            Matching records
        """
        pass

    @abstractmethod
    async def update(self, record_id: int, changes: Dict[str, Any]) -> Optional[IncentiveRecord]:
        """
        Merge ``changes`` into a record and refresh its updated_at.

        Returns:
            Updated record or None if not found
        """
        pass

    @abstractmethod
    async def delete(self, record_id: int) -> bool:
        pass

    @abstractmethod
    async def count(self) -> int:
        pass
