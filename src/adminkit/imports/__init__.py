"""CSV import pipeline: columns, importers, chunk processing and completion."""

from adminkit.imports.columns import ImportColumn
from adminkit.imports.exceptions import ImporterNotFoundError, RowImportFailedError, RowValidationError
from adminkit.imports.importer import Importer
from adminkit.imports.registry import (
    get_registered_importer,
    importer_path,
    register_importer,
    registered_importers,
    resolve_importer,
)

__all__ = [
    "ImportColumn",
    "Importer",
    "ImporterNotFoundError",
    "RowImportFailedError",
    "RowValidationError",
    "get_registered_importer",
    "importer_path",
    "register_importer",
    "registered_importers",
    "resolve_importer",
]
