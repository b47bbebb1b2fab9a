from fastapi import APIRouter, Body, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Any, Dict, List
import structlog

from ..models.database import get_db
from ..models.records import KINDS, Record, RecordKind
from ..models.schemas import ErrorResponse, MessageResponse
from ..services.record_store import RecordStore, RecordStoreError

logger = structlog.get_logger()
router = APIRouter(tags=["records"])


def build_list_endpoint(kind: RecordKind):
    async def list_records(db: AsyncSession = Depends(get_db)) -> List[Record]:
        try:
            return await RecordStore(db, kind).list()
        except RecordStoreError as e:
            raise HTTPException(status_code=500, detail=e.message)

    list_records.__name__ = f"list_{kind.collection}"
    list_records.__doc__ = f"Return every stored {kind.name} record."
    return list_records


def build_create_endpoint(kind: RecordKind):
    async def create_record(
        fields: Dict[str, Any] = Body(...),
        db: AsyncSession = Depends(get_db)
    ) -> MessageResponse:
        try:
            await RecordStore(db, kind).create(fields)
        except RecordStoreError as e:
            raise HTTPException(status_code=500, detail=e.message)
        return MessageResponse(message=kind.created_message)

    create_record.__name__ = f"create_{kind.collection}"
    create_record.__doc__ = (
        f"Store a {kind.name} record.\n\n"
        "Fields are stored as submitted after schema typing. Key fields are "
        "not checked for uniqueness and references are not resolved."
    )
    return create_record


def register_kind(target: APIRouter, kind: RecordKind) -> None:
    """Add the GET list / POST create pair for one kind."""
    path = f"/{kind.slug}"
    target.add_api_route(
        path,
        build_list_endpoint(kind),
        methods=["GET"],
        response_model=List[Dict[str, Any]],
        summary=f"List {kind.plural}",
    )
    target.add_api_route(
        path,
        build_create_endpoint(kind),
        methods=["POST"],
        status_code=201,
        response_model=MessageResponse,
        responses={500: {"model": ErrorResponse}},
        summary=f"Create a {kind.name} record",
    )


for _kind in KINDS:
    register_kind(router, _kind)
