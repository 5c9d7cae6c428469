"""
Record service shared by the Book, Project and Journal endpoints.
"""

from typing import Dict, List, Mapping

from app.core.enums import RecordKind
from app.core.exceptions import ForbiddenError, NotFoundError, ValidationException
from app.domain.entities.base import IncentiveRecord
from app.domain.entities.user_entity import User
from app.domain.repositories.record_repository import RecordRepositoryInterface
from app.infrastructure.export import TabularExportManager
from app.infrastructure.storage import IncomingFile, LocalFileStorage
from app.schemas.base import FormModel
from app.schemas.records import schemas_for
from app.services.base import BaseService


class RecordService(BaseService):
    """
    Create, read, update and delete incentive records of one kind.

    Owner metadata is copied from the authenticated user at creation.
    Every successful create or update is mirrored to the export tables;
    the export outcome is logged and never changes the response.
    """

    def __init__(
        self,
        kind: RecordKind,
        repository: RecordRepositoryInterface,
        exporter: TabularExportManager,
        storage: LocalFileStorage,
    ):
        super().__init__()
        self.kind = RecordKind(kind)
        self.repository = repository
        self.exporter = exporter
        self.storage = storage
        self.schemas = schemas_for(self.kind)

    def get_service_name(self) -> str:
        return f"{self.kind.label}RecordService"

    async def create(
        self,
        user: User,
        payload: FormModel,
        uploads: Mapping[str, IncomingFile],
    ) -> IncentiveRecord:
        missing = [f.form_name for f in self.schemas.uploads if f.required and f.form_name not in uploads]
        if missing:
            raise ValidationException(
                message=f"Please upload a proof file ({missing[0]})",
                field=missing[0],
            )

        self.log_operation("create", {"kind": self.kind.value, "user_id": user.id})
        stored: List[str] = []
        try:
            fields = payload.model_dump()
            fields.update(self._store_uploads(user, uploads, stored))
            fields.update(
                user_id=user.id,
                employee_id=user.employee_id,
                user_name=user.name,
                department=user.department,
            )
            record = await self.repository.create(fields)
        except Exception as e:
            self._discard(stored)
            self.handle_error(e, "create")

        exported = await self.exporter.append_entry(self.kind, record)
        self._log_export("created", record, exported)
        return record

    async def list(self, user: User) -> List[IncentiveRecord]:
        """Admins see every record, other users only their own; newest first."""
        owner = None if user.is_admin else user.id
        return await self.repository.find(user_id=owner)

    async def get(self, user: User, record_id: int) -> IncentiveRecord:
        return await self._get_owned(user, record_id, "read")

    async def update(
        self,
        user: User,
        record_id: int,
        payload: FormModel,
        uploads: Mapping[str, IncomingFile],
    ) -> IncentiveRecord:
        record = await self._get_owned(user, record_id, "update")
        self.log_operation("update", {"kind": self.kind.value, "id": record_id, "user_id": user.id})

        stored: List[str] = []
        try:
            changes = payload.model_dump(exclude_unset=True)
            new_paths = self._store_uploads(user, uploads, stored)
            changes.update(new_paths)
            updated = await self.repository.update(record_id, changes)
        except Exception as e:
            self._discard(stored)
            self.handle_error(e, "update")

        if updated is None:
            self._discard(stored)
            raise NotFoundError(resource=self.kind.label, resource_id=record_id)

        # replaced proofs are removed only once the record points at the new ones
        self._discard(getattr(record, attribute) for attribute in new_paths)

        exported = await self.exporter.record_update(self.kind, updated)
        self._log_export("updated", updated, exported)
        return updated

    async def delete(self, user: User, record_id: int) -> None:
        """Remove the record and its stored files; export tables keep its rows."""
        record = await self._get_owned(user, record_id, "delete")
        self.log_operation("delete", {"kind": self.kind.value, "id": record_id, "user_id": user.id})

        await self.repository.delete(record_id)
        self._discard(getattr(record, f.attribute, None) for f in self.schemas.uploads)

    async def _get_owned(self, user: User, record_id: int, action: str) -> IncentiveRecord:
        record = await self.repository.find_by_id(record_id)
        if record is None:
            raise NotFoundError(resource=self.kind.label, resource_id=record_id)
        if not (user.is_admin or user.owns(record)):
            raise ForbiddenError(
                message=f"Not authorized to {action} this {self.kind.label.lower()} entry",
                resource=self.kind.value,
                action=action,
            )
        return record

    def _store_uploads(
        self,
        user: User,
        uploads: Mapping[str, IncomingFile],
        stored: List[str],
    ) -> Dict[str, str]:
        paths: Dict[str, str] = {}
        for field in self.schemas.uploads:
            upload = uploads.get(field.form_name)
            if upload is None:
                continue
            saved = self.storage.save_incoming(upload, subfolder=self.kind.value, owner_id=user.id)
            stored.append(saved.public_path)
            paths[field.attribute] = saved.public_path
        return paths

    def _discard(self, public_paths) -> None:
        for public_path in public_paths:
            if not public_path:
                continue
            try:
                self.storage.delete_public_path(public_path)
            except Exception as e:
                self.logger.warning(f"Could not remove {public_path}: {e}")

    def _log_export(self, action: str, record: IncentiveRecord, exported: bool) -> None:
        if exported:
            self.logger.info(f"{self.kind.label} entry {record.id} {action} and exported")
        else:
            self.logger.warning(f"{self.kind.label} entry {record.id} {action} but export failed")
