# -*- coding: utf-8 -*-
import logging
import sys
import types

from services.config import Settings
from services.runtime import PythonRuntime, collect_constants, detect_server_software, is_secret_name


def test_detect_server_software():
    fake = types.ModuleType("uvicorn")
    fake.__version__ = "0.30.1"
    assert detect_server_software({"uvicorn": fake}) == "uvicorn/0.30.1"
    assert detect_server_software({}) == ""


def test_collect_constants_only_upper_case_scalars(monkeypatch):
    mod = types.ModuleType("site_constants")
    mod.SITE_NAME = "Demo"
    mod.MAX_ITEMS = 10
    mod.lower_name = "skip"
    mod.HELPERS = ["skip"]
    monkeypatch.setitem(sys.modules, "site_constants", mod)
    assert collect_constants(["site_constants", "no_such_module_here"]) == {"SITE_NAME": "Demo", "MAX_ITEMS": 10}


def test_is_secret_name():
    assert is_secret_name("DB_PASSWORD")
    assert is_secret_name("api_key")
    assert not is_secret_name("SITE_NAME")


def test_python_runtime_reads_settings():
    cfg = Settings(_env_file=None, MAX_EXECUTION_TIME=90, TIMEZONE="Europe/Vienna", DEBUG=True)
    rt = PythonRuntime(cfg)
    assert rt.limits()["max_execution_time"] == 90
    assert rt.timezone() == "Europe/Vienna"
    assert rt.display_errors() is True
    assert rt.python_version().startswith(f"{sys.version_info.major}.")


def test_error_level_follows_root_logger():
    root = logging.getLogger()
    old = root.level
    root.setLevel(logging.ERROR)
    try:
        assert PythonRuntime(Settings(_env_file=None)).error_level() == logging.ERROR
    finally:
        root.setLevel(old)


def test_settings_ignore_unknown_keys():
    cfg = Settings(_env_file=None, TIMEZONE="Europe/Berlin", UNRELATED_OPTION="x")
    assert cfg.TIMEZONE == "Europe/Berlin"
    assert not hasattr(cfg, "UNRELATED_OPTION")
