from .reader import WorkbookParseError, read_workbook

__all__ = [
    "WorkbookParseError",
    "read_workbook",
]
