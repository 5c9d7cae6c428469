from dataclasses import asdict, dataclass, field, fields
from datetime import datetime, timezone
from typing import Any, ClassVar, Dict, FrozenSet

from app.core.enums import RecordKind


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(kw_only=True)
class IncentiveRecord:
    """
    Common shape of every incentive-claim record.

    Subclasses set ``kind`` and add their own fields. Identity, ownership
    metadata and ``created_at`` are fixed at creation; ``updated_at`` is
    refreshed by every update.
    """

    kind: ClassVar[RecordKind]
    # attribute holding the mandatory uploaded proof
    proof_field: ClassVar[str]
    IMMUTABLE_FIELDS: ClassVar[FrozenSet[str]] = frozenset({
        "id", "user_id", "employee_id", "user_name", "department", "created_at",
    })

    id: int
    user_id: int
    employee_id: str
    user_name: str
    department: str
    approved: bool = False
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    @classmethod
    def field_names(cls) -> FrozenSet[str]:
        return frozenset(f.name for f in fields(cls))

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(id={self.id}, user_id={self.user_id})"
