"""Lead repository for data access."""

from uuid import UUID

from sqlalchemy import select, func, or_
from sqlalchemy.ext.asyncio import AsyncSession

from adminkit.models.lead import Lead, LeadStatus, DataSource


class LeadRepository:
    """Repository for Lead read operations and import lookups."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, lead_id: UUID, user_id: UUID | None = None) -> Lead | None:
        """Get a lead by ID."""
        query = select(Lead).where(Lead.id == lead_id)
        if user_id is not None:
            query = query.where(Lead.user_id == user_id)
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def get_by_email(self, email: str, user_id: UUID | None = None) -> Lead | None:
        """Get a lead by email, case-insensitively."""
        query = select(Lead).where(func.lower(Lead.email) == email.strip().lower())
        if user_id is not None:
            query = query.where(Lead.user_id == user_id)
        result = await self.db.execute(query.limit(1))
        return result.scalar_one_or_none()

    async def list_leads(
        self,
        page: int = 1,
        per_page: int = 20,
        user_id: UUID | None = None,
        status: list[LeadStatus] | None = None,
        source: list[DataSource] | None = None,
        import_id: UUID | None = None,
        search: str | None = None,
    ) -> tuple[list[Lead], int]:
        """List leads with filtering and pagination."""
        query = select(Lead)

        conditions = []

        if user_id:
            conditions.append(Lead.user_id == user_id)

        if status:
            conditions.append(Lead.status.in_(status))

        if source:
            conditions.append(Lead.source.in_(source))

        if import_id:
            conditions.append(Lead.import_id == import_id)

        if search:
            search_term = f"%{search}%"
            conditions.append(
                or_(
                    Lead.full_name.ilike(search_term),
                    Lead.email.ilike(search_term),
                    Lead.company_name.ilike(search_term),
                )
            )

        if conditions:
            query = query.where(*conditions)

        # Count total
        count_query = select(func.count()).select_from(query.subquery())
        total_result = await self.db.execute(count_query)
        total = total_result.scalar_one()

        # Apply pagination
        offset = (page - 1) * per_page
        query = query.order_by(Lead.created_at.desc()).offset(offset).limit(per_page)

        result = await self.db.execute(query)
        leads = list(result.scalars().all())

        return leads, total
