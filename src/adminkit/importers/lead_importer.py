"""Importer turning contact spreadsheets into leads."""

from typing import Any

from adminkit.imports import ImportColumn, Importer, RowImportFailedError, register_importer
from adminkit.models.lead import DataSource, Lead, LeadStatus
from adminkit.repositories.lead_repo import LeadRepository


def _fill_tags(record: Lead, state: list[str] | None) -> None:
    record.tags = ",".join(state) if state else None


def _fill_status(record: Lead, state: str | None) -> None:
    if state:
        record.status = LeadStatus(state.lower())


@register_importer
class LeadImporter(Importer):
    """Creates leads, or updates the lead with the same email when allowed."""

    name = "leads"
    model = Lead

    @classmethod
    def get_columns(cls) -> list[ImportColumn]:
        return [
            ImportColumn.make("first_name")
                .guess(["first", "firstname", "given name"])
                .rules(["max:255"])
                .example("Jane"),
            ImportColumn.make("last_name")
                .guess(["last", "lastname", "surname", "family name"])
                .rules(["max:255"])
                .example("Doe"),
            ImportColumn.make("email")
                .label("Email address")
                .guess(["email", "e-mail", "mail"])
                .required_mapping()
                .rules(["email", "max:255"])
                .example("jane.doe@example.com"),
            ImportColumn.make("phone")
                .guess(["phone number", "mobile", "telephone"])
                .sensitive()
                .rules(["max:50"])
                .example("+1 555 0100"),
            ImportColumn.make("company_name")
                .label("Company")
                .guess(["company", "organization", "organisation", "account"])
                .rules(["max:500"])
                .example("Acme Inc."),
            ImportColumn.make("job_title")
                .guess(["title", "position", "role"])
                .rules(["max:500"])
                .example("Head of Operations"),
            ImportColumn.make("employee_count")
                .guess(["employees", "company size", "headcount"])
                .integer()
                .rules(["integer", "min:0"])
                .example("250"),
            ImportColumn.make("linkedin_url")
                .label("LinkedIn URL")
                .guess(["linkedin", "linkedin profile", "profile url"])
                .rules(["url", "max:500"])
                .example("https://www.linkedin.com/in/janedoe"),
            ImportColumn.make("tags")
                .array(",")
                .fill_record_using(_fill_tags)
                .example("conference,warm"),
            ImportColumn.make("status")
                .rules([f"in:{','.join(status.value for status in LeadStatus)}"])
                .cast_state_using(lambda state: state.lower() if isinstance(state, str) else state)
                .fill_record_using(_fill_status)
                .example(LeadStatus.NEW.value),
        ]

    @classmethod
    def get_options_defaults(cls) -> dict[str, Any]:
        return {"update_existing": True}

    async def resolve_record(self) -> Lead:
        email = self.data.get("email")

        if email and isinstance(email, str):
            existing = await LeadRepository(self.session).get_by_email(email, user_id=self.import_.user_id)

            if existing is not None:
                if not self.options.get("update_existing"):
                    raise RowImportFailedError(f"A lead with the email [{email}] already exists.")
                return existing

        return Lead(
            user_id=self.import_.user_id,
            import_id=self.import_.id,
            source=DataSource.CSV_IMPORT,
            source_file=self.import_.file_name,
            status=LeadStatus.NEW,
        )

    def after_fill(self) -> None:
        names = [self.record.first_name, self.record.last_name]
        full_name = " ".join(name for name in names if name)
        if full_name:
            self.record.full_name = full_name

    @classmethod
    def get_completed_notification_body(cls, import_) -> str:
        successful = import_.successful_rows
        body = f"Your lead import has completed and {successful:,} {'lead' if successful == 1 else 'leads'} imported."

        failed = import_.failed_rows_count
        if failed:
            body += f" {failed:,} {'row' if failed == 1 else 'rows'} failed to import."

        return body
