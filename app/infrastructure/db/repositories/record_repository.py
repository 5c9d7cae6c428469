import dataclasses
import itertools
import logging
from typing import Any, Dict, List, Optional

from ....core.enums import RecordKind
from ....domain.entities.base import IncentiveRecord, utcnow
from ....domain.entities.records import record_type_for
from ....domain.repositories.record_repository import RecordRepositoryInterface

logger = logging.getLogger(__name__)


class InMemoryRecordRepository(RecordRepositoryInterface):
    """
    Process-lifetime store for one record kind.

    Ids are assigned sequentially from 1 and never reused. Mutations
    contain no awaits, so they are atomic on the event loop.
    """

    def __init__(self, kind: RecordKind):
        self.kind = RecordKind(kind)
        self.record_type = record_type_for(self.kind)
        self._records: Dict[int, IncentiveRecord] = {}
        self._ids = itertools.count(1)

    async def create(self, data: Dict[str, Any]) -> IncentiveRecord:
        unknown = set(data) - self.record_type.field_names()
        if unknown:
            raise ValueError(f"Unknown {self.kind.label} fields: {', '.join(sorted(unknown))}")

        payload = {k: v for k, v in data.items() if k not in ("id", "created_at", "updated_at")}
        now = utcnow()
        record = self.record_type(id=next(self._ids), created_at=now, updated_at=now, **payload)
        self._records[record.id] = record

        logger.info(f"{self.kind.label} record created: id={record.id} user_id={record.user_id}")
        return record

    async def find_by_id(self, record_id: int) -> Optional[IncentiveRecord]:
        return self._records.get(record_id)

    async def find(
        self,
        user_id: Optional[int] = None,
        newest_first: bool = True,
    ) -> List[IncentiveRecord]:
        results = list(self._records.values())

        if user_id is not None:
            results = [r for r in results if r.user_id == user_id]

        if newest_first:
            # id breaks ties between records created within the same clock tick
            results.sort(key=lambda r: (r.created_at, r.id), reverse=True)
        return results

    async def update(self, record_id: int, changes: Dict[str, Any]) -> Optional[IncentiveRecord]:
        current = self._records.get(record_id)
        if current is None:
            return None

        allowed = self.record_type.field_names() - self.record_type.IMMUTABLE_FIELDS - {"updated_at"}
        merged = {k: v for k, v in changes.items() if k in allowed}
        ignored = set(changes) - set(merged)
        if ignored:
            logger.debug(f"Ignoring immutable/unknown fields on {self.kind.label} {record_id}: {sorted(ignored)}")

        updated = dataclasses.replace(current, **merged, updated_at=utcnow())
        self._records[record_id] = updated
        return updated

    async def delete(self, record_id: int) -> bool:
        removed = self._records.pop(record_id, None)
        if removed is not None:
            logger.info(f"{self.kind.label} record deleted: id={record_id}")
        return removed is not None

    async def count(self) -> int:
        return len(self._records)
