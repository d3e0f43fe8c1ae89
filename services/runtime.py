"""Introspection of the Python process serving the backend."""
from __future__ import annotations

import importlib
import importlib.util
import logging
import platform
import re
import sys
from types import ModuleType
from typing import Any, Dict, Iterable, Optional

import httpx
from loguru import logger

from services.config import Settings, settings as default_settings

try:
    import resource
except ImportError:  # pragma: no cover - windows
    resource = None

REDACT_KEYS = ("SECRET", "PASSWORD", "PASS", "TOKEN", "KEY")
_CONSTANT_RE = re.compile(r"^[A-Z][A-Z0-9_]*$")
_SCALARS = (str, int, float, bool, type(None))

KNOWN_SERVERS = ("uvicorn", "hypercorn", "granian", "daphne", "gunicorn")


def detect_server_software(modules: Optional[Dict[str, ModuleType]] = None) -> str:
    """Name/version of the first known ASGI/WSGI server loaded in this process."""
    modules = sys.modules if modules is None else modules
    for name in KNOWN_SERVERS:
        mod = modules.get(name)
        if mod is not None:
            version = getattr(mod, "__version__", "")
            return f"{name}/{version}" if version else name
    return ""


def is_secret_name(name: str) -> bool:
    upper = name.upper()
    return any(key in upper for key in REDACT_KEYS)


def module_constants(mod: ModuleType) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for name, value in vars(mod).items():
        if _CONSTANT_RE.match(name) and isinstance(value, _SCALARS):
            out[name] = value
    return out


class PythonRuntime:
    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or default_settings

    def machine(self) -> str:
        return platform.machine()

    def python_version(self) -> str:
        return platform.python_version()

    def implementation(self) -> str:
        return platform.python_implementation()

    def memory_limit(self) -> Optional[int]:
        """Address space soft limit in bytes, None when unlimited or unknown."""
        if resource is None:
            return None
        soft, _hard = resource.getrlimit(resource.RLIMIT_AS)
        if soft == resource.RLIM_INFINITY:
            return None
        return soft

    def limits(self) -> Dict[str, Any]:
        mem = self.memory_limit()
        return {
            "max_form_fields": self.settings.MAX_FORM_FIELDS,
            "max_execution_time": self.settings.MAX_EXECUTION_TIME,
            "memory_limit": f"{mem // (1024 * 1024)}M" if mem is not None else None,
            "max_input_time": self.settings.MAX_INPUT_TIME,
            "upload_max_filesize": self.settings.UPLOAD_MAX_FILESIZE,
            "post_max_size": self.settings.POST_MAX_SIZE,
        }

    def http_client_version(self) -> str:
        return httpx.__version__

    def has_image_library(self) -> bool:
        return importlib.util.find_spec("PIL") is not None

    def debugger_attached(self) -> bool:
        return sys.gettrace() is not None or "pydevd" in sys.modules or "debugpy" in sys.modules

    def timezone(self) -> str:
        return self.settings.TIMEZONE

    def user_constants(self) -> Dict[str, Any]:
        return collect_constants(self.settings.constants_modules)

    def error_level(self) -> int:
        return logging.getLogger().getEffectiveLevel()

    def display_errors(self) -> bool:
        return self.settings.DEBUG

    def display_startup_errors(self) -> bool:
        return self.settings.DISPLAY_STARTUP_ERRORS or bool(sys.flags.dev_mode)


def collect_constants(module_names: Iterable[str]) -> Dict[str, Any]:
    constants: Dict[str, Any] = {}
    for name in module_names:
        try:
            mod = importlib.import_module(name)
        except ImportError as e:
            logger.warning(f"Constants module {name} not importable: {e}")
            continue
        constants.update(module_constants(mod))
    return constants
