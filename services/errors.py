from __future__ import annotations

__all__ = ["StatusReportError", "DatabaseUnavailable", "InvalidIdentifier"]


class StatusReportError(Exception):
    """Base error of the status report."""


class DatabaseUnavailable(StatusReportError):
    pass


class InvalidIdentifier(StatusReportError):
    pass
