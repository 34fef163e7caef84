"""Finishing an import once all of its chunks have run."""

from typing import Any
from uuid import UUID

import httpx
import structlog
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from adminkit.config import settings
from adminkit.imports import events
from adminkit.imports.registry import resolve_importer
from adminkit.models.import_ import Import
from adminkit.repositories.import_repo import ImportRepository

logger = structlog.get_logger(__name__)


def build_completion_payload(import_: Import, body: str) -> dict[str, Any]:
    return {
        "import_id": str(import_.id),
        "status": "completed",
        "file_name": import_.file_name,
        "total_rows": import_.total_rows,
        "processed_rows": import_.processed_rows,
        "successful_rows": import_.successful_rows,
        "failed_rows": import_.failed_rows_count,
        "completed_at": import_.completed_at.isoformat() if import_.completed_at else None,
        "message": body,
    }


async def complete_import(
    session_maker: async_sessionmaker[AsyncSession],
    import_id: UUID | str,
) -> str | None:
    """Stamp the import as completed and notify; runs at most once per import.

    Returns the notification body, or None when there was nothing to do.
    """
    import_id = UUID(str(import_id))

    async with session_maker() as session:
        repo = ImportRepository(session)
        import_ = await repo.get(import_id)

        if import_ is None:
            logger.warning("Import no longer exists, skipping completion", import_id=str(import_id))
            return None

        newly_completed = await repo.mark_completed(import_id)
        await session.commit()

        if not newly_completed:
            logger.info("Import already completed", import_id=str(import_id))
            return None

        await session.refresh(import_)

        importer_cls = resolve_importer(import_.importer)
        body = importer_cls.get_completed_notification_body(import_)

        logger.info(
            "Import completed",
            import_id=str(import_id),
            user_id=str(import_.user_id),
            successful_rows=import_.successful_rows,
            failed_rows=import_.failed_rows_count,
            notification=body,
        )

        await events.dispatch(events.ImportCompleted(import_=import_, notification_body=body))

        if import_.webhook_url:
            await send_webhook(import_.webhook_url, build_completion_payload(import_, body))

        return body


async def send_webhook(url: str, payload: dict[str, Any]) -> bool:
    """Send webhook notification; failures are logged, not raised."""
    try:
        async with httpx.AsyncClient(timeout=settings.import_webhook_timeout) as client:
            response = await client.post(url, json=payload)
            response.raise_for_status()
    except httpx.HTTPError as exc:
        logger.warning("Webhook delivery failed", url=url, error=str(exc))
        return False

    logger.info("Webhook sent", url=url, status_code=response.status_code)
    return True
