"""Connectors between the entity repository and durable SQL stores."""

from __future__ import annotations

from .base import (
    PersistenceAdapter,
    SQLClientProtocol,
    Statement,
    StoreAPIError,
    StoreAuthError,
    StoreClientError,
)
from .engine import EngineSQLClient
from .gateway import SQLGatewayClient
from .sql_store import SQLPersistenceAdapter

__all__ = [
    "EngineSQLClient",
    "PersistenceAdapter",
    "SQLClientProtocol",
    "SQLGatewayClient",
    "SQLPersistenceAdapter",
    "Statement",
    "StoreAPIError",
    "StoreAuthError",
    "StoreClientError",
]
