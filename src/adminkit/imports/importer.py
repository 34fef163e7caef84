"""Base class for pluggable per-row importers."""

import inspect
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING, Any, ClassVar

from sqlalchemy import inspect as sa_inspect

from adminkit.config import settings
from adminkit.imports.columns import ImportColumn
from adminkit.imports.exceptions import RowValidationError

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from adminkit.models.import_ import Import


class Importer:
    """Turns one CSV row into one record.

    Subclasses declare their columns and target model; the base class runs
    the pipeline: remap, cast, resolve, validate, fill, save. Lifecycle hooks
    (``before_validate``, ``after_fill``, ``before_create``...) may be
    defined as plain or async methods.
    """

    name: ClassVar[str] = ""
    model: ClassVar[type | None] = None

    chunk_size: ClassVar[int | None] = None
    csv_delimiter: ClassVar[str | None] = None
    job_queue: ClassVar[str | None] = None
    job_max_exceptions: ClassVar[int | None] = None

    def __init__(
        self,
        import_: "Import",
        column_map: dict[str, str],
        options: dict[str, Any] | None = None,
        session: "AsyncSession | None" = None,
    ):
        self.import_ = import_
        self.column_map = column_map
        self.options = {**self.get_options_defaults(), **(options or {})}
        self.session = session

        self.original_data: dict[str, Any] = {}
        self.data: dict[str, Any] = {}
        self.record: Any = None

        self._columns = {column.get_name(): column for column in self.get_columns()}

    @classmethod
    def get_columns(cls) -> list[ImportColumn]:
        raise NotImplementedError(f"{cls.__name__} must define get_columns()")

    @classmethod
    def get_options_defaults(cls) -> dict[str, Any]:
        return {}

    async def __call__(self, data: dict[str, Any]) -> None:
        self.original_data = dict(data)
        self.data = dict(data)
        self.record = None

        self.remap_data()
        self.cast_data()

        self.record = await self.resolve_record()

        if self.record is None:
            return

        await self._call_hook("before_validate")
        self.validate_data()
        await self._call_hook("after_validate")

        await self._call_hook("before_fill")
        self.fill_record()
        await self._call_hook("after_fill")

        exists = self._record_exists()

        await self._call_hook("before_save")
        await self._call_hook("before_update" if exists else "before_create")
        await self.save_record()
        await self._call_hook("after_update" if exists else "after_create")
        await self._call_hook("after_save")

    def remap_data(self) -> None:
        """Rename CSV headers to column names according to the column map."""
        data = dict(self.data)

        for column_name in self._columns:
            header = self.column_map.get(column_name)
            if not header:
                continue
            if header not in self.original_data:
                continue
            data[column_name] = self.original_data[header]

        self.data = data

    def cast_data(self) -> None:
        for column_name, column in self._columns.items():
            if column_name not in self.data:
                continue
            self.data[column_name] = column.cast_state(self.data[column_name], self.options)

    async def resolve_record(self) -> Any:
        """Return the record this row fills, or None to skip the row."""
        if self.model is None:
            raise NotImplementedError(f"{type(self).__name__} must set model or override resolve_record()")
        return self.model()

    def validate_data(self) -> None:
        errors: dict[str, list[str]] = {}

        for column_name, column in self._columns.items():
            messages = column.validate(self.data.get(column_name))
            if messages:
                errors[column_name] = messages

        if errors:
            raise RowValidationError(errors)

    def fill_record(self) -> None:
        for column_name, column in self._columns.items():
            if column_name not in self.data:
                continue
            column.fill_record(self.record, self.data[column_name], importer=self)

    async def save_record(self) -> None:
        if self.session is None:
            raise RuntimeError("Importer has no database session to save records with")
        self.session.add(self.record)
        await self.session.flush()

    def get_column(self, name: str) -> ImportColumn | None:
        return self._columns.get(name)

    def get_cached_columns(self) -> list[ImportColumn]:
        return list(self._columns.values())

    # Queue settings

    @classmethod
    def get_chunk_size(cls) -> int:
        return cls.chunk_size or settings.import_chunk_size

    def get_job_queue(self) -> str:
        return self.job_queue or settings.import_queue

    def get_job_retry_until(self) -> datetime | None:
        return datetime.now(timezone.utc) + timedelta(hours=settings.import_retry_window_hours)

    def get_job_backoff(self) -> int | list[int] | None:
        return list(settings.import_backoff_seconds) or None

    def get_job_tags(self) -> list[str]:
        return [f"import{self.import_.id}"]

    def get_job_max_exceptions(self) -> int:
        return self.job_max_exceptions or settings.import_max_exceptions

    # Notifications

    @classmethod
    def get_completed_notification_body(cls, import_: "Import") -> str:
        successful = import_.successful_rows
        body = f"Your import has completed and {successful:,} {_plural('row', successful)} imported."

        failed = import_.failed_rows_count
        if failed:
            body += f" {failed:,} {_plural('row', failed)} failed to import."

        return body

    async def _call_hook(self, hook: str) -> None:
        method = getattr(self, hook, None)
        if method is None:
            return
        result = method()
        if inspect.isawaitable(result):
            await result

    def _record_exists(self) -> bool:
        state = sa_inspect(self.record, raiseerr=False)
        return bool(state is not None and state.persistent)


def _plural(word: str, count: int) -> str:
    return word if count == 1 else f"{word}s"
