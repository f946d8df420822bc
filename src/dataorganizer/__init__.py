"""DataOrganizer -- spreadsheet-like table editor with CSV/PDF import and export."""

__version__ = "1.0.0"
