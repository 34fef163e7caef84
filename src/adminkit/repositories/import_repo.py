"""Import repository for data access."""

from datetime import datetime, timezone
from typing import Any
from uuid import UUID

from sqlalchemy import select, func, update
from sqlalchemy.ext.asyncio import AsyncSession

from adminkit.models.import_ import Import, FailedImportRow


class ImportRepository:
    """Repository for Import and FailedImportRow operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, import_id: UUID, user_id: UUID | None = None) -> Import | None:
        """Get an import by ID, optionally scoped to its owner."""
        query = select(Import).where(Import.id == import_id)
        if user_id is not None:
            query = query.where(Import.user_id == user_id)

        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def list_imports(
        self,
        page: int = 1,
        per_page: int = 20,
        user_id: UUID | None = None,
        completed: bool | None = None,
    ) -> tuple[list[Import], int]:
        """List imports with filtering and pagination."""
        query = select(Import)

        conditions = []
        if user_id:
            conditions.append(Import.user_id == user_id)
        if completed is True:
            conditions.append(Import.completed_at.is_not(None))
        elif completed is False:
            conditions.append(Import.completed_at.is_(None))

        if conditions:
            query = query.where(*conditions)

        # Count total
        count_query = select(func.count()).select_from(query.subquery())
        total_result = await self.db.execute(count_query)
        total = total_result.scalar_one()

        # Apply ordering and pagination
        query = query.order_by(Import.created_at.desc())
        offset = (page - 1) * per_page
        query = query.offset(offset).limit(per_page)

        result = await self.db.execute(query)
        imports = list(result.scalars().all())

        return imports, total

    async def create(
        self,
        user_id: UUID,
        file_name: str,
        importer: str,
        total_rows: int,
        webhook_url: str | None = None,
    ) -> Import:
        """Create a new import."""
        import_ = Import(
            user_id=user_id,
            file_name=file_name,
            importer=importer,
            total_rows=total_rows,
            processed_rows=0,
            successful_rows=0,
            webhook_url=webhook_url,
        )

        self.db.add(import_)
        await self.db.flush()
        await self.db.refresh(import_)

        return import_

    async def increment_counters(
        self,
        import_id: UUID,
        processed_rows: int,
        successful_rows: int,
    ) -> None:
        """Add a chunk's counts, then clamp both counters to total_rows.

        The arithmetic runs in SQL so concurrent chunks never overwrite
        each other's progress.
        """
        await self.db.execute(
            update(Import)
            .where(Import.id == import_id)
            .values(
                processed_rows=Import.processed_rows + processed_rows,
                successful_rows=Import.successful_rows + successful_rows,
            )
            .execution_options(synchronize_session=False)
        )

        await self.db.execute(
            update(Import)
            .where(Import.id == import_id, Import.processed_rows > Import.total_rows)
            .values(processed_rows=Import.total_rows)
            .execution_options(synchronize_session=False)
        )

        await self.db.execute(
            update(Import)
            .where(Import.id == import_id, Import.successful_rows > Import.total_rows)
            .values(successful_rows=Import.total_rows)
            .execution_options(synchronize_session=False)
        )

    async def create_failed_rows(
        self,
        import_id: UUID,
        rows: list[dict[str, Any]],
    ) -> list[FailedImportRow]:
        """Persist failed rows (``data`` + ``validation_error``) of an import."""
        failed_rows = [
            FailedImportRow(
                import_id=import_id,
                data=row["data"],
                validation_error=row.get("validation_error"),
            )
            for row in rows
        ]

        if failed_rows:
            self.db.add_all(failed_rows)
            await self.db.flush()

        return failed_rows

    async def list_failed_rows(
        self,
        import_id: UUID,
        page: int = 1,
        per_page: int = 50,
    ) -> tuple[list[FailedImportRow], int]:
        """List failed rows of an import with pagination."""
        query = select(FailedImportRow).where(FailedImportRow.import_id == import_id)

        count_query = select(func.count()).select_from(query.subquery())
        total = (await self.db.execute(count_query)).scalar_one()

        query = query.order_by(FailedImportRow.created_at, FailedImportRow.id)
        query = query.offset((page - 1) * per_page).limit(per_page)

        result = await self.db.execute(query)
        return list(result.scalars().all()), total

    async def all_failed_rows(self, import_id: UUID) -> list[FailedImportRow]:
        """All failed rows of an import, oldest first."""
        result = await self.db.execute(
            select(FailedImportRow)
            .where(FailedImportRow.import_id == import_id)
            .order_by(FailedImportRow.created_at, FailedImportRow.id)
        )
        return list(result.scalars().all())

    async def mark_completed(self, import_id: UUID) -> bool:
        """Stamp completed_at; returns False if it was already set."""
        result = await self.db.execute(
            update(Import)
            .where(Import.id == import_id, Import.completed_at.is_(None))
            .values(completed_at=datetime.now(timezone.utc))
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1
