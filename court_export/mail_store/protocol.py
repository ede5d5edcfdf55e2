"""Email source protocol."""

from typing import Protocol, runtime_checkable

from court_export.models.email import EmailRecord


@runtime_checkable
class EmailSource(Protocol):
    """Anything that can hand over already-fetched email records in full."""

    def list_emails(self) -> list[EmailRecord]:
        """Return every record; order is irrelevant to grouping."""
        ...
