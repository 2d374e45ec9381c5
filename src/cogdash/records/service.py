"""Create, update and delete rows of the registered record tables."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

import structlog
from sqlalchemy.exc import SQLAlchemyError

from cogdash.errors import Forbidden, NotFound, StorageFailure, ValidationFailed
from cogdash.records.registry import TableSchema

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from cogdash.auth.dependencies import CurrentUser

logger = structlog.get_logger()


def parse_row_id(value: str | None) -> str:
    """Row ids are UUIDs; anything else is rejected before a lookup."""
    if not value:
        raise ValidationFailed("Missing required fields: id")
    try:
        return str(uuid.UUID(str(value)))
    except ValueError as e:
        raise ValidationFailed("Invalid id", id=value) from e


def _check_owner_change(schema: TableSchema, user: CurrentUser, data: dict[str, Any]) -> None:
    if schema.owner_field in data and str(data[schema.owner_field]) != user.id:
        raise Forbidden(f"Cannot change {schema.owner_field} to a different user")


def _check_mutable(schema: TableSchema, operation: str) -> None:
    if schema.append_only:
        raise Forbidden(f"Rows of {schema.name} cannot be {operation}", table=schema.name)


def validate_update(schema: TableSchema, user: CurrentUser, data: dict[str, Any]) -> dict[str, Any]:
    """Validate an update payload and return attribute-keyed coerced values."""
    invalid = [name for name in data if not schema.has_field(name)]
    if invalid:
        raise ValidationFailed(
            "Invalid field names",
            invalidFields=invalid,
            allowedFields=schema.field_names,
        )

    readonly = [name for name in data if schema.is_readonly(name) and name != schema.owner_field]
    if readonly:
        raise ValidationFailed("Cannot update readonly fields", readonlyFields=readonly)

    _check_owner_change(schema, user, data)

    values = {
        schema.get_field(name).attr: schema.get_field(name).coerce(value)
        for name, value in data.items()
        if name != schema.owner_field
    }
    if not values:
        raise ValidationFailed("No valid fields to update")
    return values


def build_insert(
    schema: TableSchema,
    user: CurrentUser,
    data: dict[str, Any],
    now: datetime | None = None,
) -> dict[str, Any]:
    """Build attribute-keyed insert values for a new row owned by ``user``.

    The owner column is always the caller, readonly fields are dropped and
    registry defaults fill in omitted optional fields.
    """
    invalid = [name for name in data if not schema.has_field(name)]
    if invalid:
        raise ValidationFailed(
            "Invalid field names",
            invalidFields=invalid,
            allowedFields=schema.field_names,
        )

    if now is None:
        now = datetime.now(timezone.utc)
    data = {**data, schema.owner_field: user.id}

    if schema.has_field("date") and data.get("date") is None:
        data["date"] = now.date()
    if schema.has_field("updated_at") and data.get("updated_at") is None:
        data["updated_at"] = now

    missing = [name for name in schema.required_fields if data.get(name) is None]
    if missing:
        raise ValidationFailed(
            f"Missing required fields: {', '.join(missing)}",
            missingRequired=missing,
        )

    values: dict[str, Any] = {}
    for spec in schema.fields:
        if spec.readonly and spec.name != schema.owner_field:
            continue
        if spec.name in data:
            values[spec.attr] = spec.coerce(data[spec.name])
        elif spec.has_default:
            values[spec.attr] = spec.coerce(spec.default)
    return values


async def _load_owned(db: AsyncSession, schema: TableSchema, user: CurrentUser, row_id: str) -> Any:  # noqa: ANN401
    try:
        row = await db.get(schema.model, row_id)
    except SQLAlchemyError as e:
        raise StorageFailure(
            "Failed to load record",
            table=schema.name,
            operation="select",
        ) from e
    if row is None:
        raise NotFound("Record not found", table=schema.name, id=row_id)
    if getattr(row, schema.owner_field) != user.id:
        raise Forbidden("Forbidden: can only modify own records")
    return row


async def _commit(db: AsyncSession, schema: TableSchema, operation: str, row: Any = None) -> None:  # noqa: ANN401
    try:
        await db.commit()
        if row is not None:
            await db.refresh(row)
    except SQLAlchemyError as e:
        await db.rollback()
        raise StorageFailure(
            f"Failed to {operation} record",
            table=schema.name,
            operation=operation,
            details=str(getattr(e, "orig", None) or e),
        ) from e


async def create_row(
    db: AsyncSession,
    schema: TableSchema,
    user: CurrentUser,
    data: dict[str, Any],
) -> dict[str, Any]:
    """Insert a row owned by the caller and return it by field name."""
    row = schema.model(**build_insert(schema, user, data))
    db.add(row)
    await _commit(db, schema, "insert", row)
    logger.info("record_created", table=schema.name, user_id=user.id)
    return schema.to_dict(row)


async def update_row(
    db: AsyncSession,
    schema: TableSchema,
    user: CurrentUser,
    row_id: str,
    data: dict[str, Any],
) -> dict[str, Any]:
    """Apply field updates to one of the caller's rows and return it."""
    _check_mutable(schema, "updated")
    values = validate_update(schema, user, data)
    row = await _load_owned(db, schema, user, parse_row_id(row_id))

    for attr, value in values.items():
        setattr(row, attr, value)
    if schema.has_field("updated_at") and "updated_at" not in data:
        row.updated_at = datetime.now(timezone.utc)

    await _commit(db, schema, "update", row)
    logger.info("record_updated", table=schema.name, user_id=user.id, fields=sorted(data))
    return schema.to_dict(row)


async def delete_row(
    db: AsyncSession,
    schema: TableSchema,
    user: CurrentUser,
    row_id: str,
) -> str:
    """Delete one of the caller's rows, returning its id."""
    _check_mutable(schema, "deleted")
    row_id = parse_row_id(row_id)
    row = await _load_owned(db, schema, user, row_id)
    await db.delete(row)
    await _commit(db, schema, "delete")
    logger.info("record_deleted", table=schema.name, user_id=user.id, id=row_id)
    return row_id
