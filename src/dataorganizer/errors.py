"""Error types and codes for table import, export and editing."""

from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    unsupported_format = "unsupported_format"
    insufficient_data = "insufficient_data"
    import_failed = "import_failed"
    no_data_to_export = "no_data_to_export"


class TableError(Exception):
    """Base class for all table-related errors."""


class NoDataToExportError(TableError):
    """Raised when a table with no columns or no rows is exported."""

    def __init__(self, message: str = "No data to export") -> None:
        super().__init__(message)


class LockedError(TableError):
    """An edit targeted a locked row or column.

    Attributes:
        kind: ``"row"`` or ``"column"``.
        target_id: Id of the locked row or column.
    """

    def __init__(self, kind: str, target_id: str) -> None:
        self.kind = kind
        self.target_id = target_id
        super().__init__(f"{kind.capitalize()} {target_id!r} is locked")
