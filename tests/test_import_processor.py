"""Tests for processing a chunk of rows into leads."""

import pytest
from sqlalchemy import select

from adminkit.importers import LeadImporter
from adminkit.imports import RowImportFailedError, register_importer
from adminkit.imports import events
from adminkit.imports.payload import encode_rows
from adminkit.imports.processor import ImportChunkProcessor
from adminkit.models import FailedImportRow, Import, Lead
from adminkit.models.lead import DataSource, LeadStatus

COLUMN_MAP = {
    "first_name": "First",
    "last_name": "Last",
    "email": "Email",
    "phone": "Phone",
    "employee_count": "Employees",
    "tags": "Tags",
    "status": "Status",
}


def lead_row(email="jane@example.com", **overrides):
    row = {
        "First": "Jane",
        "Last": "Doe",
        "Email": email,
        "Phone": "+1 555 0100",
        "Employees": "250",
        "Tags": "conference, warm",
        "Status": "Qualified",
    }
    row.update(overrides)
    return row


@register_importer
class ExplodingLeadImporter(LeadImporter):
    """Fails in different ways depending on the first name."""

    name = "exploding-leads"

    def before_save(self):
        if self.record.first_name == "Reject":
            raise RowImportFailedError("Rejected by the importer.")
        if self.record.first_name == "Boom":
            raise RuntimeError("database went away")


@register_importer
class LateFailingLeadImporter(LeadImporter):
    """Fails after the lead has been flushed."""

    name = "late-failing-leads"

    def after_save(self):
        if self.record.first_name == "Late":
            raise RuntimeError("notification service unavailable")


async def fetch_import(session_maker, import_id) -> Import:
    async with session_maker() as session:
        return await session.get(Import, import_id)


async def fetch_all(session_maker, model):
    async with session_maker() as session:
        result = await session.execute(select(model).order_by(model.created_at))
        return list(result.scalars().all())


@pytest.mark.asyncio
async def test_chunk_creates_leads_and_counts_rows(session_maker, make_import, user):
    import_ = await make_import(total_rows=2)
    rows = [lead_row(), lead_row(email="john@example.com", First="John", Tags="")]

    result = await ImportChunkProcessor(session_maker, import_.id, encode_rows(rows), COLUMN_MAP).handle()

    assert result.processed_rows == 2
    assert result.successful_rows == 2
    assert result.failed_rows == 0

    leads = await fetch_all(session_maker, Lead)
    jane = next(lead for lead in leads if lead.email == "jane@example.com")
    assert jane.full_name == "Jane Doe"
    assert jane.employee_count == 250
    assert jane.tags == "conference,warm"
    assert jane.status == LeadStatus.QUALIFIED
    assert jane.source == DataSource.CSV_IMPORT
    assert jane.import_id == import_.id
    assert jane.user_id == user.id
    assert jane.source_file == "contacts.csv"

    refreshed = await fetch_import(session_maker, import_.id)
    assert refreshed.processed_rows == 2
    assert refreshed.successful_rows == 2


@pytest.mark.asyncio
async def test_validation_failures_are_recorded_without_sensitive_fields(session_maker, make_import):
    import_ = await make_import(total_rows=2)
    rows = [lead_row(), lead_row(email="not-an-email", Employees="-3")]

    result = await ImportChunkProcessor(session_maker, import_.id, rows, COLUMN_MAP).handle()

    assert result.successful_rows == 1
    assert result.failed_rows == 1

    failed = await fetch_all(session_maker, FailedImportRow)
    assert len(failed) == 1
    assert failed[0].import_id == import_.id
    assert "Phone" not in failed[0].data
    assert failed[0].data["Email"] == "not-an-email"
    assert failed[0].validation_error == (
        "The Email address field must be a valid email address. "
        "The Employee count field must be at least 0."
    )

    refreshed = await fetch_import(session_maker, import_.id)
    assert refreshed.processed_rows == 2
    assert refreshed.successful_rows == 1
    assert refreshed.failed_rows_count == 1


@pytest.mark.asyncio
async def test_import_failed_and_unexpected_errors(session_maker, make_import):
    import_ = await make_import(total_rows=3, importer="exploding-leads")
    rows = [
        lead_row(email="ok@example.com"),
        lead_row(email="reject@example.com", First="Reject"),
        lead_row(email="boom@example.com", First="Boom"),
    ]

    result = await ImportChunkProcessor(session_maker, import_.id, rows, COLUMN_MAP).handle()

    assert result.processed_rows == 3
    assert result.successful_rows == 1

    failed = {row.data["Email"]: row.validation_error for row in await fetch_all(session_maker, FailedImportRow)}
    assert failed == {
        "reject@example.com": "Rejected by the importer.",
        "boom@example.com": None,
    }

    emails = [lead.email for lead in await fetch_all(session_maker, Lead)]
    assert emails == ["ok@example.com"]


@pytest.mark.asyncio
async def test_failure_after_save_rolls_back_only_that_row(session_maker, make_import):
    import_ = await make_import(total_rows=3, importer="late-failing-leads")
    rows = [
        lead_row(email="a@example.com"),
        lead_row(email="late@example.com", First="Late"),
        lead_row(email="c@example.com"),
    ]

    result = await ImportChunkProcessor(session_maker, import_.id, rows, COLUMN_MAP).handle()

    assert result.processed_rows == 3
    assert result.successful_rows == 2
    assert result.failed_rows == 1

    emails = sorted(lead.email for lead in await fetch_all(session_maker, Lead))
    assert emails == ["a@example.com", "c@example.com"]

    failed = await fetch_all(session_maker, FailedImportRow)
    assert [(row.data["Email"], row.validation_error) for row in failed] == [("late@example.com", None)]


@pytest.mark.asyncio
async def test_existing_lead_is_updated_or_rejected(session_maker, make_import):
    first = await make_import(total_rows=1)
    await ImportChunkProcessor(session_maker, first.id, [lead_row()], COLUMN_MAP).handle()

    second = await make_import(total_rows=1)
    await ImportChunkProcessor(
        session_maker, second.id, [lead_row(email="JANE@example.com", Last="Smith")], COLUMN_MAP
    ).handle()

    leads = await fetch_all(session_maker, Lead)
    assert len(leads) == 1
    assert leads[0].last_name == "Smith"

    third = await make_import(total_rows=1)
    result = await ImportChunkProcessor(
        session_maker, third.id, [lead_row()], COLUMN_MAP, options={"update_existing": False}
    ).handle()

    assert result.successful_rows == 0
    failed = await fetch_all(session_maker, FailedImportRow)
    assert failed[0].validation_error == "A lead with the email [jane@example.com] already exists."


@pytest.mark.asyncio
async def test_counters_are_clamped_to_total_rows(session_maker, make_import):
    import_ = await make_import(total_rows=1)
    rows = [lead_row(email="a@example.com"), lead_row(email="b@example.com")]

    await ImportChunkProcessor(session_maker, import_.id, rows, COLUMN_MAP).handle()

    refreshed = await fetch_import(session_maker, import_.id)
    assert refreshed.processed_rows == 1
    assert refreshed.successful_rows == 1


@pytest.mark.asyncio
async def test_missing_import_drops_the_chunk(session_maker):
    from uuid import uuid4

    result = await ImportChunkProcessor(session_maker, uuid4(), [lead_row()], COLUMN_MAP).handle()

    assert result is None
    assert await fetch_all(session_maker, Lead) == []


@pytest.mark.asyncio
async def test_chunk_processed_event_is_dispatched(session_maker, make_import):
    import_ = await make_import(total_rows=1)
    seen = []

    @events.listen(events.ImportChunkProcessed)
    async def record_event(event):
        seen.append(event)

    try:
        await ImportChunkProcessor(session_maker, import_.id, [lead_row()], COLUMN_MAP).handle()
    finally:
        events.forget(events.ImportChunkProcessed, record_event)

    assert len(seen) == 1
    assert seen[0].import_.id == import_.id
    assert seen[0].processed_rows == 1
    assert seen[0].successful_rows == 1
    assert seen[0].column_map == COLUMN_MAP


def test_sensitive_data_filter_ignores_unmapped_columns():
    processor = ImportChunkProcessor(None, "00000000-0000-0000-0000-000000000000", [], {"phone": " "})
    processor.importer = LeadImporter(Import(), column_map={"phone": " "})

    assert processor.filter_sensitive_data({" ": "x", "Phone": "y"}) == {" ": "x", "Phone": "y"}
