"""Tests for completing an import once every chunk has run."""

from unittest.mock import AsyncMock, patch

import httpx
import pytest

from adminkit.imports import events
from adminkit.imports.completion import complete_import, send_webhook
from adminkit.imports.processor import ImportChunkProcessor
from adminkit.models import Import


@pytest.mark.asyncio
async def test_complete_import_stamps_once_and_builds_notification(session_maker, make_import):
    import_ = await make_import(total_rows=3)

    async with session_maker() as session:
        stored = await session.get(Import, import_.id)
        stored.processed_rows = 3
        stored.successful_rows = 2
        await session.commit()

    body = await complete_import(session_maker, import_.id)

    assert body == "Your lead import has completed and 2 leads imported. 1 row failed to import."

    async with session_maker() as session:
        stored = await session.get(Import, import_.id)
        assert stored.completed_at is not None
        first_completed_at = stored.completed_at

    assert await complete_import(session_maker, import_.id) is None

    async with session_maker() as session:
        stored = await session.get(Import, import_.id)
        assert stored.completed_at == first_completed_at


@pytest.mark.asyncio
async def test_complete_import_of_empty_file(session_maker, make_import):
    import_ = await make_import(total_rows=0)

    body = await complete_import(session_maker, import_.id)

    assert body == "Your lead import has completed and 0 leads imported."


@pytest.mark.asyncio
async def test_complete_import_dispatches_event_and_webhook(session_maker, make_import):
    import_ = await make_import(total_rows=1, webhook_url="https://hooks.example.com/imports")
    await ImportChunkProcessor(
        session_maker, import_.id, [{"Email": "jane@example.com"}], {"email": "Email"}
    ).handle()

    completed = []

    @events.listen(events.ImportCompleted)
    def record_event(event):
        completed.append(event)

    try:
        with patch("adminkit.imports.completion.send_webhook", new=AsyncMock(return_value=True)) as webhook:
            body = await complete_import(session_maker, import_.id)
    finally:
        events.forget(events.ImportCompleted, record_event)

    assert body == "Your lead import has completed and 1 lead imported."
    assert completed[0].notification_body == body

    url, payload = webhook.await_args.args
    assert url == "https://hooks.example.com/imports"
    assert payload["import_id"] == str(import_.id)
    assert payload["status"] == "completed"
    assert payload["successful_rows"] == 1
    assert payload["failed_rows"] == 0
    assert payload["message"] == body


@pytest.mark.asyncio
async def test_failing_listener_does_not_break_completion(session_maker, make_import):
    import_ = await make_import(total_rows=0)

    @events.listen(events.ImportCompleted)
    def broken_listener(event):
        raise RuntimeError("listener bug")

    try:
        body = await complete_import(session_maker, import_.id)
    finally:
        events.forget(events.ImportCompleted, broken_listener)

    assert body is not None


@pytest.mark.asyncio
async def test_complete_missing_import(session_maker):
    from uuid import uuid4

    assert await complete_import(session_maker, uuid4()) is None


@pytest.mark.asyncio
async def test_send_webhook_reports_failures():
    client = AsyncMock()
    client.__aenter__.return_value = client
    client.post.side_effect = httpx.ConnectError("refused")

    with patch("adminkit.imports.completion.httpx.AsyncClient", return_value=client):
        assert await send_webhook("https://hooks.example.com", {"status": "completed"}) is False
