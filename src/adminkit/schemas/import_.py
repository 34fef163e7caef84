"""Import schemas for request/response validation."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class ImportResponse(BaseModel):
    """Schema for import response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    file_name: str
    importer: str
    total_rows: int
    processed_rows: int
    successful_rows: int
    failed_rows_count: int
    progress_percentage: float
    is_completed: bool
    completed_at: datetime | None = None
    webhook_url: str | None = None
    created_at: datetime
    updated_at: datetime


class ImportCreateResponse(ImportResponse):
    """Created import plus the mapping it was queued with."""

    status: str = "queued"
    column_map: dict[str, str]
    options: dict[str, Any] = {}


class ImportListResponse(BaseModel):
    """Paginated list of imports."""

    items: list[ImportResponse]
    total: int
    page: int
    per_page: int
    pages: int


class FailedImportRowResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    data: dict[str, Any]
    validation_error: str | None = None
    created_at: datetime


class FailedImportRowListResponse(BaseModel):
    """Paginated list of failed rows."""

    items: list[FailedImportRowResponse]
    total: int
    page: int
    per_page: int
    pages: int


class ImportColumnSchema(BaseModel):
    name: str
    label: str
    guesses: list[str]
    required_mapping: bool
    sensitive: bool
    rules: list[str]
    example_header: str
    examples: list[Any] = []


class ImporterSchema(BaseModel):
    """A registered importer and the columns it accepts."""

    name: str
    path: str
    chunk_size: int
    options: dict[str, Any] = {}
    columns: list[ImportColumnSchema]
