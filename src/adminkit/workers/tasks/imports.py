"""CSV import tasks for Celery."""

import asyncio
from datetime import datetime, timezone
from typing import Any

import structlog
from celery import shared_task

from adminkit.config import settings
from adminkit.log import configure_logging
from adminkit.workers.celery_app import celery_app  # noqa: F401

logger = structlog.get_logger(__name__)


def run_async(coro):
    """Run async function in sync context for Celery."""
    loop = asyncio.new_event_loop()
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


def retry_countdown(job_options: dict[str, Any], retries: int, now: datetime | None = None) -> int | None:
    """Seconds to wait before the next attempt, or None to give up.

    ``retries`` counts attempts already retried; ``backoff`` may be a single
    delay or one delay per attempt, the last one repeating.
    """
    max_exceptions = job_options.get("max_exceptions") or settings.import_max_exceptions
    if retries + 1 >= max_exceptions:
        return None

    retry_until = job_options.get("retry_until")
    if retry_until:
        deadline = datetime.fromisoformat(retry_until)
        if deadline.tzinfo is None:
            deadline = deadline.replace(tzinfo=timezone.utc)
        if (now or datetime.now(timezone.utc)) >= deadline:
            return None

    backoff = job_options.get("backoff")
    if not backoff:
        return 0
    if isinstance(backoff, list):
        return int(backoff[min(retries, len(backoff) - 1)])
    return int(backoff)


@shared_task(bind=True, max_retries=None)
def import_csv_chunk(
    self,
    import_id: str,
    rows: list[dict] | str,
    column_map: dict[str, str],
    options: dict | None = None,
    job_options: dict | None = None,
):
    """Import one chunk of CSV rows into records."""
    from adminkit.imports.processor import ImportChunkProcessor
    from adminkit.models.database import worker_sessions

    configure_logging()
    job_options = job_options or {}

    async def _process_chunk():
        async with worker_sessions() as session_maker:
            processor = ImportChunkProcessor(session_maker, import_id, rows, column_map, options)
            return await processor.handle()

    with structlog.contextvars.bound_contextvars(
        import_id=import_id,
        tags=job_options.get("tags", []),
        attempt=self.request.retries + 1,
    ):
        try:
            result = run_async(_process_chunk())
        except Exception as exc:
            countdown = retry_countdown(job_options, self.request.retries)

            if countdown is None:
                # Report instead of raising so the chord still completes the import
                logger.error("Import chunk failed permanently", error=str(exc), exc_info=exc)
                return {"success": False, "import_id": import_id, "error": str(exc)}

            logger.warning("Import chunk failed, retrying", error=str(exc), countdown=countdown)
            raise self.retry(exc=exc, countdown=countdown)

    if result is None:
        return {"success": False, "import_id": import_id, "error": "Import not found"}

    return {"success": True, **result.to_dict()}


@shared_task(bind=True)
def complete_import(self, import_id: str):
    """Mark an import completed after its last chunk ran."""
    from adminkit.imports.completion import complete_import as finish_import
    from adminkit.models.database import worker_sessions

    configure_logging()

    async def _complete():
        async with worker_sessions() as session_maker:
            return await finish_import(session_maker, import_id)

    notification = run_async(_complete())
    return {"success": True, "import_id": import_id, "notification": notification}
