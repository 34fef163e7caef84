"""CSV import models: the import itself and the rows that failed."""

from datetime import datetime
from typing import TYPE_CHECKING, Any
from uuid import UUID

from sqlalchemy import String, Text, Integer, DateTime, ForeignKey, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from adminkit.models.base import Base, JSONBType

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from adminkit.imports.importer import Importer
    from adminkit.models.user import User


class Import(Base):
    """A CSV file being imported into application records."""

    __tablename__ = "imports"

    # Foreign Key
    user_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # Source
    file_name: Mapped[str] = mapped_column(String(500), nullable=False)
    importer: Mapped[str] = mapped_column(String(255), nullable=False)  # Dotted path of the Importer class

    # Progress Tracking
    total_rows: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    processed_rows: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    successful_rows: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    # Completion
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    webhook_url: Mapped[str | None] = mapped_column(String(500))

    # Relationships
    user: Mapped["User"] = relationship("User")
    failed_rows: Mapped[list["FailedImportRow"]] = relationship(
        "FailedImportRow", back_populates="import_", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<Import(id={self.id}, importer='{self.importer}', processed={self.processed_rows}/{self.total_rows})>"

    @property
    def failed_rows_count(self) -> int:
        """Rows that did not end up as records."""
        return self.total_rows - self.successful_rows

    @property
    def progress_percentage(self) -> float:
        """Calculate progress percentage."""
        if self.total_rows == 0:
            return 100.0 if self.completed_at else 0.0
        return (self.processed_rows / self.total_rows) * 100

    @property
    def is_completed(self) -> bool:
        return self.completed_at is not None

    def get_importer(
        self,
        column_map: dict[str, str],
        options: dict[str, Any] | None = None,
        session: "AsyncSession | None" = None,
    ) -> "Importer":
        """Build the importer this import was started with."""
        from adminkit.imports.registry import resolve_importer

        importer_cls = resolve_importer(self.importer)
        return importer_cls(self, column_map=column_map, options=options or {}, session=session)


class FailedImportRow(Base):
    """A CSV row that could not be imported."""

    __tablename__ = "failed_import_rows"

    # Foreign Key
    import_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("imports.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    data: Mapped[dict] = mapped_column(JSONBType, nullable=False)  # Original CSV row, sensitive fields removed
    validation_error: Mapped[str | None] = mapped_column(Text)

    # Relationship
    import_: Mapped["Import"] = relationship("Import", back_populates="failed_rows")

    def __repr__(self) -> str:
        return f"<FailedImportRow(id={self.id}, import_id={self.import_id})>"
