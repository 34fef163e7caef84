"""Pydantic schemas for request/response validation."""

from adminkit.schemas.import_ import (
    ImportResponse,
    ImportCreateResponse,
    ImportListResponse,
    FailedImportRowResponse,
    FailedImportRowListResponse,
    ImporterSchema,
)
from adminkit.schemas.lead import LeadResponse, LeadListResponse
from adminkit.schemas.panel import PanelResponse, NavigationResponse

__all__ = [
    "ImportResponse",
    "ImportCreateResponse",
    "ImportListResponse",
    "FailedImportRowResponse",
    "FailedImportRowListResponse",
    "ImporterSchema",
    "LeadResponse",
    "LeadListResponse",
    "PanelResponse",
    "NavigationResponse",
]
