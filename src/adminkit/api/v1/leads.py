"""Lead read endpoints."""

from uuid import UUID

from fastapi import APIRouter, HTTPException, Query, status

from adminkit.api.deps import CurrentUser, DbSession
from adminkit.models.lead import LeadStatus, DataSource
from adminkit.repositories.lead_repo import LeadRepository
from adminkit.schemas.common import page_count
from adminkit.schemas.lead import LeadListResponse, LeadResponse

router = APIRouter()


@router.get("", response_model=LeadListResponse)
async def list_leads(
    db: DbSession,
    current_user: CurrentUser,
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=100),
    status: list[LeadStatus] | None = Query(None),
    source: list[DataSource] | None = Query(None),
    import_id: UUID | None = None,
    search: str | None = None,
) -> LeadListResponse:
    """List leads with filtering and pagination."""
    repo = LeadRepository(db)
    leads, total = await repo.list_leads(
        page=page,
        per_page=per_page,
        user_id=current_user.id,
        status=status,
        source=source,
        import_id=import_id,
        search=search,
    )

    return LeadListResponse(
        items=[LeadResponse.from_lead(lead) for lead in leads],
        total=total,
        page=page,
        per_page=per_page,
        pages=page_count(total, per_page),
    )


@router.get("/{lead_id}", response_model=LeadResponse)
async def get_lead(lead_id: UUID, db: DbSession, current_user: CurrentUser) -> LeadResponse:
    """Get a single lead by ID."""
    lead = await LeadRepository(db).get(lead_id, user_id=current_user.id)

    if not lead:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Lead {lead_id} not found",
        )

    return LeadResponse.from_lead(lead)
