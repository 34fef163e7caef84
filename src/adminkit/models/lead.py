"""Lead model - the records produced by the bundled lead importer."""

import enum
from uuid import UUID

from sqlalchemy import String, Integer, ForeignKey, Enum, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from adminkit.models.base import Base


class LeadStatus(str, enum.Enum):
    """Lead status enum."""

    NEW = "new"
    CONTACTED = "contacted"
    QUALIFIED = "qualified"
    INVALID = "invalid"
    ARCHIVED = "archived"


class DataSource(str, enum.Enum):
    """Data source enum."""

    MANUAL = "manual"
    CSV_IMPORT = "csv_import"
    API = "api"


class Lead(Base):
    """Lead model for storing contact information."""

    __tablename__ = "leads"

    # Foreign Keys
    user_id: Mapped[UUID | None] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="SET NULL"),
        index=True,
    )
    import_id: Mapped[UUID | None] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("imports.id", ondelete="SET NULL"),
        index=True,
    )

    # Basic Info
    first_name: Mapped[str | None] = mapped_column(String(255))
    last_name: Mapped[str | None] = mapped_column(String(255))
    full_name: Mapped[str | None] = mapped_column(String(500), index=True)
    email: Mapped[str | None] = mapped_column(String(255), index=True)
    phone: Mapped[str | None] = mapped_column(String(50))

    # Professional Info
    job_title: Mapped[str | None] = mapped_column(String(500))
    company_name: Mapped[str | None] = mapped_column(String(500))
    employee_count: Mapped[int | None] = mapped_column(Integer)
    linkedin_url: Mapped[str | None] = mapped_column(String(500))
    tags: Mapped[str | None] = mapped_column(String(1000))  # Comma separated

    # Status & Source
    status: Mapped[LeadStatus] = mapped_column(
        Enum(LeadStatus, values_callable=lambda e: [x.value for x in e]),
        default=LeadStatus.NEW,
        index=True,
    )
    source: Mapped[DataSource] = mapped_column(
        Enum(DataSource, values_callable=lambda e: [x.value for x in e]),
        nullable=False,
    )
    source_file: Mapped[str | None] = mapped_column(String(500))  # For CSV imports

    def __repr__(self) -> str:
        return f"<Lead(id={self.id}, name='{self.full_name}', email='{self.email}')>"
