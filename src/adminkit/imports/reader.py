"""Reading uploaded CSV files and mapping their headers to importer columns."""

import csv
import io
from dataclasses import dataclass, field

from adminkit.imports.importer import Importer
from adminkit.imports.payload import Row

SNIFF_DELIMITERS = ",;\t|"


@dataclass
class CsvDocument:
    """Parsed CSV upload."""

    headers: list[str]
    rows: list[Row] = field(default_factory=list)

    @property
    def total_rows(self) -> int:
        return len(self.rows)


def decode_csv_bytes(content: bytes) -> str:
    """Decode as UTF-8 (dropping a BOM), falling back to Windows-1252."""
    try:
        return content.decode("utf-8-sig")
    except UnicodeDecodeError:
        return content.decode("cp1252", errors="replace")


def read_csv(content: bytes | str, delimiter: str | None = None) -> CsvDocument:
    """Parse a CSV upload into headers and header-keyed rows.

    Fully blank lines are skipped and missing trailing cells read as "".
    """
    text = decode_csv_bytes(content) if isinstance(content, bytes) else content

    if not text.strip():
        return CsvDocument(headers=[])

    if delimiter is None:
        delimiter = sniff_delimiter(text)

    reader = csv.reader(io.StringIO(text, newline=""), delimiter=delimiter)

    headers: list[str] | None = None
    rows: list[Row] = []

    for cells in reader:
        if not any(cell.strip() for cell in cells):
            continue

        if headers is None:
            headers = [cell.strip() for cell in cells]
            continue

        row = {}
        for index, header in enumerate(headers):
            if not header:
                continue
            row[header] = cells[index] if index < len(cells) else ""
        rows.append(row)

    return CsvDocument(headers=[header for header in headers or [] if header], rows=rows)


def sniff_delimiter(text: str) -> str:
    sample = "\n".join(text.splitlines()[:20])
    try:
        return csv.Sniffer().sniff(sample, delimiters=SNIFF_DELIMITERS).delimiter
    except csv.Error:
        return ","


def guess_column_map(importer_cls: type[Importer], headers: list[str]) -> dict[str, str]:
    """Map every column whose guesses match one of the headers."""
    column_map: dict[str, str] = {}
    for column in importer_cls.get_columns():
        header = column.guess_header(headers)
        if header is not None:
            column_map[column.get_name()] = header
    return column_map


def missing_required_mappings(
    importer_cls: type[Importer],
    column_map: dict[str, str],
    headers: list[str] | None = None,
) -> list[str]:
    """Names of required columns that are unmapped or mapped to an absent header."""
    missing = []
    for column in importer_cls.get_columns():
        if not column.is_mapping_required():
            continue
        header = column_map.get(column.get_name())
        if not header or (headers is not None and header not in headers):
            missing.append(column.get_name())
    return missing


def build_example_csv(importer_cls: type[Importer]) -> str:
    """A CSV template with each column's example header and example values."""
    columns = importer_cls.get_columns()
    examples = [column.get_examples() for column in columns]
    example_count = max((len(values) for values in examples), default=0)

    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerow([column.get_example_header() for column in columns])

    for index in range(example_count):
        writer.writerow([values[index] if index < len(values) else "" for values in examples])

    return output.getvalue()
