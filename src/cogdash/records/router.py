"""Generic record API over the closed table registry."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from cogdash.auth.dependencies import CurrentUser, get_current_user
from cogdash.database import get_session
from cogdash.errors import Forbidden
from cogdash.records.registry import get_table
from cogdash.records.schemas import (
    CreateRowRequest,
    DeleteRowRequest,
    DeleteRowResponse,
    RowResponse,
    UpdateFieldRequest,
    UpdateTableRequest,
    UpdateTableResponse,
)
from cogdash.records.service import create_row, delete_row, update_row

router = APIRouter(prefix="/api", tags=["Records"])


@router.post("/create-row", response_model=RowResponse, status_code=201)
async def create_record(
    body: CreateRowRequest,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> RowResponse:
    """Insert a row into a registered table, owned by the caller."""
    schema = get_table(body.table)
    row = await create_row(db, schema, current_user, body.data)
    return RowResponse(message=f"Row created in {schema.name}", data=row)


@router.put("/update-field", response_model=RowResponse)
async def update_field(
    body: UpdateFieldRequest,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> RowResponse:
    """Update a single field of one of the caller's rows."""
    schema = get_table(body.table)
    schema.get_field(body.field_name)
    row = await update_row(db, schema, current_user, body.id, {body.field_name: body.value})
    return RowResponse(message=f"Field {body.field_name} updated", data=row)


@router.post(
    "/update-table",
    response_model=UpdateTableResponse,
    response_model_by_alias=True,
)
async def update_table(
    body: UpdateTableRequest,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> UpdateTableResponse:
    """Update several fields of one of the caller's rows."""
    schema = get_table(body.table)
    row = await update_row(db, schema, current_user, body.id, body.data)
    return UpdateTableResponse(
        message=f"Updated {len(body.data)} field(s) in {schema.name}",
        data=row,
        updated_fields=list(body.data),
    )


@router.delete("/delete-row", response_model=DeleteRowResponse, response_model_by_alias=True)
async def delete_record(
    body: DeleteRowRequest,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> DeleteRowResponse:
    """Delete one of the caller's rows."""
    schema = get_table(body.table)
    deleted_id = await delete_row(db, schema, current_user, body.id)
    return DeleteRowResponse(message=f"Row deleted from {schema.name}", deleted_id=deleted_id)


@router.post("/create-table")
async def create_table(
    _current_user: CurrentUser = Depends(get_current_user),
) -> None:
    """Table creation through the API is disabled."""
    raise Forbidden(
        "Table creation via API is disabled",
        instructions="Add new tables with an Alembic migration and register them in cogdash.records.registry",
    )
