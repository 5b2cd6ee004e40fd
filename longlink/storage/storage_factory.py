"""
Storage factory – switch storage backend from config (lazy env version)
======================================================================

Centralizes selection of the storage backend (in-memory vs PostgreSQL) so the
rest of the library stays ignorant of where data lives.

- Reads environment **at call time** to avoid stale values in tests.
- Imports the DB backend **only if** the selected backend is "postgres".

Environment variables
---------------------
- LONGLINK_STORAGE_BACKEND: "memory" (default) or "postgres"
- LONGLINK_DB_DSN:          DSN string if backend == "postgres"
- LONGLINK_LOOKUP_TABLE:    lookup table name for postgres (default "endpoints")
"""

import logging
import os
from typing import Optional

from .base import BaseStorage
from .storage import Storage

log = logging.getLogger("longlink.storage")


def get_storage(backend: Optional[str] = None, **kwargs) -> BaseStorage:
    """
    Return a storage adapter based on configuration.

    Parameters
    ----------
    backend : str, optional
        "memory" (default) or "postgres". If omitted, reads LONGLINK_STORAGE_BACKEND.
    kwargs : dict
        Extra args for the backend constructor. For postgres: dsn="...", table="...".

    Raises
    ------
    ValueError
        Unknown backend, or postgres selected without a DSN.
    """
    be = (backend or os.getenv("LONGLINK_STORAGE_BACKEND", "memory")).strip().lower()
    log.info("Selected storage backend: %r", be)

    if be == "memory":
        return Storage()

    if be == "postgres":
        dsn = kwargs.get("dsn") or os.getenv("LONGLINK_DB_DSN", "")
        if not dsn:
            raise ValueError("DB_DSN is required for postgres backend (env LONGLINK_DB_DSN)")
        table = kwargs.get("table") or os.getenv("LONGLINK_LOOKUP_TABLE", "endpoints")
        # Local import to avoid loading psycopg when not using postgres
        from .db_storage import DBStorage

        return DBStorage(dsn=dsn, table=table)

    raise ValueError(f"Unknown storage backend: {be!r}")
