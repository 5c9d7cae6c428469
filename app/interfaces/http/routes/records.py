"""
CRUD endpoints for incentive records, one router per record kind.

Create and update accept multipart forms with the client's camelCase
field names; proof documents arrive as file parts.
"""

from typing import Any, Dict, Tuple

from fastapi import APIRouter, Depends, Request, status
from starlette.datastructures import UploadFile

from app.core.enums import RecordKind
from app.core.response import APIListResponse, APIResponse
from app.domain.entities.user_entity import User
from app.infrastructure.storage import IncomingFile
from app.interfaces.dependencies import get_current_user, record_service_dependency
from app.schemas.base import validate_payload
from app.schemas.records import schemas_for
from app.services.record_service import RecordService


async def read_multipart(request: Request) -> Tuple[Dict[str, Any], Dict[str, IncomingFile]]:
    """Split a multipart form into plain fields and uploaded files"""
    form = await request.form()
    fields: Dict[str, Any] = {}
    files: Dict[str, IncomingFile] = {}
    for key, value in form.multi_items():
        if isinstance(value, UploadFile):
            if value.filename:
                files[key] = IncomingFile(
                    filename=value.filename,
                    content_type=value.content_type,
                    content=await value.read(),
                )
            await value.close()
        else:
            fields[key] = value
    return fields, files


def build_record_router(kind: RecordKind) -> APIRouter:
    schemas = schemas_for(kind)
    label = kind.label[:-1]
    get_service = record_service_dependency(kind)

    router = APIRouter()

    @router.post(
        "",
        response_model=APIResponse[schemas.read],
        status_code=status.HTTP_201_CREATED,
        name=f"create_{kind.value}",
    )
    async def create_record(
        request: Request,
        current_user: User = Depends(get_current_user),
        service: RecordService = Depends(get_service),
    ):
        fields, files = await read_multipart(request)
        payload = validate_payload(schemas.create, fields)
        record = await service.create(current_user, payload, files)
        return APIResponse.ok(message=f"{label} entry created", data=schemas.read.model_validate(record))

    @router.get("", response_model=APIListResponse[schemas.read], name=f"list_{kind.value}")
    async def list_records(
        current_user: User = Depends(get_current_user),
        service: RecordService = Depends(get_service),
    ):
        records = await service.list(current_user)
        return APIListResponse(
            count=len(records),
            data=[schemas.read.model_validate(r) for r in records],
        )

    @router.get("/{record_id}", response_model=APIResponse[schemas.read], name=f"get_{kind.value}")
    async def get_record(
        record_id: int,
        current_user: User = Depends(get_current_user),
        service: RecordService = Depends(get_service),
    ):
        record = await service.get(current_user, record_id)
        return APIResponse.ok(data=schemas.read.model_validate(record))

    @router.put("/{record_id}", response_model=APIResponse[schemas.read], name=f"update_{kind.value}")
    async def update_record(
        record_id: int,
        request: Request,
        current_user: User = Depends(get_current_user),
        service: RecordService = Depends(get_service),
    ):
        fields, files = await read_multipart(request)
        payload = validate_payload(schemas.update, fields)
        record = await service.update(current_user, record_id, payload, files)
        return APIResponse.ok(message=f"{label} entry updated", data=schemas.read.model_validate(record))

    @router.delete("/{record_id}", response_model=APIResponse[Dict[str, Any]], name=f"delete_{kind.value}")
    async def delete_record(
        record_id: int,
        current_user: User = Depends(get_current_user),
        service: RecordService = Depends(get_service),
    ):
        await service.delete(current_user, record_id)
        return APIResponse.ok(message=f"{label} entry deleted", data={})

    return router
