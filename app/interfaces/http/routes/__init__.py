from fastapi import APIRouter

from app.core.enums import RecordKind

from .auth import router as auth_router
from .excel import router as excel_router
from .records import build_record_router

api_router = APIRouter()

# Include all routers with prefixes
api_router.include_router(auth_router, prefix="/auth", tags=["Authentication"])
for kind in RecordKind:
    api_router.include_router(build_record_router(kind), prefix=f"/{kind.value}", tags=[kind.label])
api_router.include_router(excel_router, prefix="/excel", tags=["Excel Export"])
