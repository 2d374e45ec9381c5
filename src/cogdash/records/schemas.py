"""Request/response schemas for the generic record endpoints."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class CreateRowRequest(BaseModel):
    table: str
    data: dict[str, Any]


class UpdateFieldRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    table: str
    id: str
    field_name: str = Field(..., alias="fieldName")
    value: Any = None


class UpdateTableRequest(BaseModel):
    table: str
    id: str
    data: dict[str, Any]


class DeleteRowRequest(BaseModel):
    table: str
    id: str


class RowResponse(BaseModel):
    success: bool = True
    message: str
    data: dict[str, Any]


class UpdateTableResponse(RowResponse):
    model_config = ConfigDict(populate_by_name=True)

    updated_fields: list[str] = Field(..., alias="updatedFields")


class DeleteRowResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    message: str
    deleted_id: str = Field(..., alias="deletedId")
