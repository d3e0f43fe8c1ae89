# services/__init__.py
from . import i18n
from . import headers
from . import runtime
from . import status_report

__all__ = ["i18n", "headers", "runtime", "status_report"]
