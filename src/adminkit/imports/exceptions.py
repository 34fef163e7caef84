"""Exceptions raised while importing CSV rows."""


class RowImportFailedError(Exception):
    """Raised by an importer when a row cannot become a record.

    The message is stored on the failed row and shown to the user.
    """


class RowValidationError(Exception):
    """Raised when a row's data does not pass the importer's column rules."""

    def __init__(self, errors: dict[str, list[str]]):
        self.errors = errors
        super().__init__(self.flattened_message())

    def flattened_message(self) -> str:
        """All messages of all columns, joined by a single space."""
        return " ".join(message for messages in self.errors.values() for message in messages)


class ImporterNotFoundError(LookupError):
    """Raised when an importer name or path does not resolve to an Importer."""
