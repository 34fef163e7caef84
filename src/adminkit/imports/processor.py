"""Processing of one chunk of CSV rows.

This is the work a queued import job performs: run every row through the
importer, classify its outcome, then record failures and bump the import's
counters in the same transaction.
"""

from dataclasses import dataclass
from typing import Any
from uuid import UUID

import structlog
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from adminkit.imports import events
from adminkit.imports.exceptions import RowImportFailedError, RowValidationError
from adminkit.imports.importer import Importer
from adminkit.imports.payload import Row, decode_rows, utf8_scrub
from adminkit.repositories.import_repo import ImportRepository

logger = structlog.get_logger(__name__)


@dataclass
class ChunkResult:
    """Outcome of one processed chunk."""

    import_id: UUID
    processed_rows: int
    successful_rows: int
    failed_rows: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "import_id": str(self.import_id),
            "processed_rows": self.processed_rows,
            "successful_rows": self.successful_rows,
            "failed_rows": self.failed_rows,
        }


class ImportChunkProcessor:
    """Imports one chunk of rows for an Import."""

    def __init__(
        self,
        session_maker: async_sessionmaker[AsyncSession],
        import_id: UUID | str,
        rows: list[Row] | str,
        column_map: dict[str, str],
        options: dict[str, Any] | None = None,
    ):
        self.session_maker = session_maker
        self.import_id = UUID(str(import_id))
        self.rows = rows
        self.column_map = column_map
        self.options = options or {}

        self.importer: Importer | None = None
        self._failed_rows: list[dict[str, Any]] = []

    async def handle(self) -> ChunkResult | None:
        """Process the chunk; returns None when the import no longer exists."""
        async with self.session_maker() as session:
            repo = ImportRepository(session)
            import_ = await repo.get(self.import_id)

            if import_ is None:
                logger.warning("Import no longer exists, dropping chunk", import_id=str(self.import_id))
                return None

            with structlog.contextvars.bound_contextvars(
                import_id=str(import_.id),
                user_id=str(import_.user_id),
            ):
                self.importer = import_.get_importer(self.column_map, self.options, session=session)

                processed_rows = 0
                successful_rows = 0

                for row in decode_rows(self.rows):
                    row = utf8_scrub(row)

                    try:
                        async with session.begin_nested():
                            await self.importer(row)
                        successful_rows += 1
                    except RowImportFailedError as exc:
                        self._log_failed_row(row, str(exc))
                    except RowValidationError as exc:
                        self._log_failed_row(row, exc.flattened_message())
                    except Exception:
                        logger.exception("Unexpected error while importing row")
                        self._log_failed_row(row)

                    processed_rows += 1

                await repo.increment_counters(
                    self.import_id,
                    processed_rows=processed_rows,
                    successful_rows=successful_rows,
                )
                await repo.create_failed_rows(self.import_id, self._failed_rows)
                await session.commit()

                await session.refresh(import_)

                logger.info(
                    "Import chunk processed",
                    processed_rows=processed_rows,
                    successful_rows=successful_rows,
                    failed_rows=len(self._failed_rows),
                )

                await events.dispatch(
                    events.ImportChunkProcessed(
                        import_=import_,
                        column_map=self.column_map,
                        options=self.options,
                        processed_rows=processed_rows,
                        successful_rows=successful_rows,
                    )
                )

                return ChunkResult(
                    import_id=self.import_id,
                    processed_rows=processed_rows,
                    successful_rows=successful_rows,
                    failed_rows=len(self._failed_rows),
                )

    def _log_failed_row(self, data: Row, validation_error: str | None = None) -> None:
        self._failed_rows.append({
            "data": self.filter_sensitive_data(data),
            "validation_error": validation_error,
        })

    def filter_sensitive_data(self, data: Row) -> Row:
        """Drop the CSV fields that feed sensitive columns."""
        filtered = dict(data)

        for column in self.importer.get_cached_columns():
            if not column.is_sensitive():
                continue

            csv_header = self.column_map.get(column.get_name())

            if not csv_header or not csv_header.strip():
                continue

            filtered.pop(csv_header, None)

        return filtered
