"""Splitting an import into queued chunk jobs."""

from typing import Any

import structlog
from celery import chord

from adminkit.imports.importer import Importer
from adminkit.imports.payload import Row, encode_rows
from adminkit.models.import_ import Import

logger = structlog.get_logger(__name__)


def chunk_rows(rows: list[Row], size: int) -> list[list[Row]]:
    if size < 1:
        raise ValueError("Chunk size must be at least 1")
    return [rows[start:start + size] for start in range(0, len(rows), size)]


def build_job_options(importer: Importer) -> dict[str, Any]:
    """Queue settings the chunk task needs for its retry decisions."""
    retry_until = importer.get_job_retry_until()
    return {
        "retry_until": retry_until.isoformat() if retry_until else None,
        "backoff": importer.get_job_backoff(),
        "max_exceptions": importer.get_job_max_exceptions(),
        "tags": importer.get_job_tags(),
    }


def dispatch_import_chunks(
    import_: Import,
    rows: list[Row],
    column_map: dict[str, str],
    options: dict[str, Any] | None = None,
):
    """Queue one task per chunk, completing the import once all have run."""
    from adminkit.workers.tasks.imports import complete_import, import_csv_chunk

    options = options or {}
    importer = import_.get_importer(column_map, options)
    job_options = build_job_options(importer)
    queue = importer.get_job_queue()

    chunks = chunk_rows(rows, importer.get_chunk_size())

    callback = complete_import.si(str(import_.id)).set(queue=queue)

    logger.info(
        "Dispatching import",
        import_id=str(import_.id),
        importer=import_.importer,
        total_rows=len(rows),
        chunks=len(chunks),
        queue=queue,
    )

    if not chunks:
        return callback.apply_async()

    header = [
        import_csv_chunk.s(
            str(import_.id),
            encode_rows(chunk),
            column_map,
            options,
            job_options,
        ).set(queue=queue, headers={"tags": job_options["tags"]})
        for chunk in chunks
    ]

    return chord(header)(callback)
