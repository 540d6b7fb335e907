"""SQL client backed by a SQLAlchemy engine (sqlite, MySQL, PostgreSQL ...)."""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, List, Mapping, Optional, Sequence

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from .base import Statement, StoreAPIError

logger = logging.getLogger(__name__)

DEFAULT_DATABASE_URL = os.getenv("MEDICONNECT_DATABASE_URL", "")


class EngineSQLClient:
    """Runs textual SQL with named ``:param`` placeholders through an engine."""

    def __init__(
        self,
        database_url: str = DEFAULT_DATABASE_URL,
        *,
        engine: Optional[Engine] = None,
        echo: bool = False,
    ) -> None:
        if engine is None and not database_url:
            raise ValueError("database_url must be provided")

        self.database_url = database_url or str(engine.url)
        if engine is None:
            try:
                engine = create_engine(
                    database_url,
                    echo=echo,
                    future=True,
                    pool_pre_ping=True,
                )
            except (ImportError, SQLAlchemyError) as exc:
                logger.error("Cannot create a database engine: %s", exc)
                raise StoreAPIError(f"Cannot create a database engine: {exc}") from exc
        self._engine = engine

    @property
    def engine(self) -> Engine:
        return self._engine

    @property
    def dialect(self) -> str:
        return self._engine.dialect.name

    def fetch_all(self, query: str, params: Optional[Mapping[str, Any]] = None) -> List[Dict[str, Any]]:
        try:
            with self._engine.connect() as conn:
                result = conn.execute(text(query), dict(params or {}))
                return [dict(row._mapping) for row in result]
        except SQLAlchemyError as exc:
            logger.error("Query failed: %s", exc)
            raise StoreAPIError("Failed to run query against the database") from exc

    def execute(self, query: str, params: Optional[Mapping[str, Any]] = None) -> int:
        try:
            with self._engine.begin() as conn:
                result = conn.execute(text(query), dict(params or {}))
                return result.rowcount if result.rowcount is not None else 0
        except SQLAlchemyError as exc:
            logger.error("Statement failed: %s", exc)
            raise StoreAPIError("Failed to execute statement against the database") from exc

    def execute_many(self, statements: Sequence[Statement]) -> None:
        try:
            with self._engine.begin() as conn:
                for query, params in statements:
                    conn.execute(text(query), dict(params or {}))
        except SQLAlchemyError as exc:
            logger.error("Transaction failed: %s", exc)
            raise StoreAPIError("Failed to execute transaction against the database") from exc

    def ping(self) -> bool:
        try:
            with self._engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError as exc:
            logger.warning("Database at %s is unreachable: %s", self._engine.url, exc)
            return False

    def dispose(self) -> None:
        self._engine.dispose()


__all__ = ["DEFAULT_DATABASE_URL", "EngineSQLClient"]
