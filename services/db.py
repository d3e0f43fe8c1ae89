# -*- coding: utf-8 -*-
"""Database utilities (SQLAlchemy) for the status report."""
from __future__ import annotations

import re
from typing import Any, Dict, List, Mapping, Optional

from loguru import logger
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from services.config import settings
from services.errors import DatabaseUnavailable, InvalidIdentifier

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

_engine: Optional[Engine] = None


def checked_identifier(name: str) -> str:
    """Plain table names only; they end up in SQL text."""
    if not _IDENTIFIER_RE.match(name or ""):
        raise InvalidIdentifier(f"Not a plain SQL identifier: {name!r}")
    return name


def _normalize_url(url: str) -> str:
    if not url:
        return url
    # Hosting platforms often provide postgres:// scheme; SQLAlchemy requires postgresql://
    if url.startswith("postgres://"):
        url = url.replace("postgres://", "postgresql+psycopg2://", 1)
    return url


def _build_engine(url: str) -> Engine:
    url = _normalize_url(url)
    if not url:
        raise DatabaseUnavailable("DATABASE_URL is not set.")
    try:
        return create_engine(url, echo=False, pool_pre_ping=True)
    except (SQLAlchemyError, ImportError) as e:
        raise DatabaseUnavailable(f"Cannot create DB engine: {e}") from e


def get_engine() -> Engine:
    global _engine
    if _engine is None:
        _engine = _build_engine((settings.DATABASE_URL or "").strip())
        logger.info("DB engine created.")
    return _engine


_PG_TABLE_STATUS = """
    SELECT c.relname AS "Name",
           pg_relation_size(c.oid) AS "Data_length",
           pg_indexes_size(c.oid) AS "Index_length"
    FROM pg_class c
    JOIN pg_namespace n ON n.oid = c.relnamespace
    WHERE c.relkind = 'r'
      AND n.nspname NOT IN ('pg_catalog', 'information_schema')
"""


class SqlAlchemyExecutor:
    def __init__(self, engine: Engine) -> None:
        self.engine = engine

    def fetch_all(self, sql: str, params: Optional[Mapping[str, Any]] = None) -> List[Dict[str, Any]]:
        try:
            with self.engine.connect() as conn:
                res = conn.execute(text(sql), dict(params or {}))
                return [dict(m) for m in res.mappings()]
        except SQLAlchemyError as e:
            raise DatabaseUnavailable(str(e)) from e

    def table_status(self) -> List[Dict[str, Any]]:
        dialect = self.engine.dialect.name
        if dialect in ("mysql", "mariadb"):
            return self.fetch_all("SHOW TABLE STATUS")
        if dialect == "postgresql":
            return self.fetch_all(_PG_TABLE_STATUS)
        if dialect == "sqlite":
            return self._sqlite_status()
        logger.warning(f"No table size query for dialect {dialect}")
        return []

    def _sqlite_status(self) -> List[Dict[str, Any]]:
        # per-table sizes need the optional dbstat table; report the whole file instead
        tables = self.fetch_all("SELECT name FROM sqlite_master WHERE type = 'table'")
        if not tables:
            return []
        page_count = self.fetch_all("PRAGMA page_count")[0]["page_count"]
        page_size = self.fetch_all("PRAGMA page_size")[0]["page_size"]
        return [{"Name": "main", "Data_length": page_count * page_size, "Index_length": 0}]
