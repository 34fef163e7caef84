"""Lead schemas for response validation."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from adminkit.models.lead import LeadStatus, DataSource


class LeadResponse(BaseModel):
    """Schema for lead response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    import_id: UUID | None = None
    first_name: str | None = None
    last_name: str | None = None
    full_name: str | None = None
    email: str | None = None
    phone: str | None = None
    job_title: str | None = None
    company_name: str | None = None
    employee_count: int | None = None
    linkedin_url: str | None = None
    tags: list[str] = []
    status: LeadStatus
    source: DataSource
    source_file: str | None = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_lead(cls, lead) -> "LeadResponse":
        data = {key: getattr(lead, key) for key in cls.model_fields if key != "tags"}
        return cls(**data, tags=lead.tags.split(",") if lead.tags else [])


class LeadListResponse(BaseModel):
    """Paginated list of leads."""

    items: list[LeadResponse]
    total: int
    page: int
    per_page: int
    pages: int
