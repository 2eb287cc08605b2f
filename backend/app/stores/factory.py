"""
Record store factory - picks the backend once at startup.

``STUDENT_STORE`` selects the backend:
- ``sql`` (default): SqlStudentStore on DATABASE_URL, tables created on demand
- ``memory``: InMemoryStudentStore, data lost on exit

If the database cannot be initialised the factory falls back to the
in-memory store and logs a warning, so the console still starts.
"""

import os
from typing import Optional

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from app.database import build_session_factory, create_tables, engine as default_engine
from app.logging_config import get_logger, log_with_context
from app.stores.base import StudentStore
from app.stores.memory import InMemoryStudentStore
from app.stores.sql import SqlStudentStore

logger = get_logger("store")

STUDENT_STORE = os.getenv("STUDENT_STORE", "sql").strip().lower()


class StudentStoreFactory:
    """Registry of store backends by name."""

    _backends = {
        "memory": InMemoryStudentStore,
        "sql": SqlStudentStore,
    }

    @classmethod
    def create(cls, backend: str = None, bind: Optional[Engine] = None,
               fallback: bool = True) -> StudentStore:
        """
        Build the store for ``backend``.

        Args:
            backend: "memory" or "sql"; defaults to STUDENT_STORE
            bind: engine for the sql backend; defaults to the app engine
            fallback: use the memory store if the database is unreachable

        Raises:
            ValueError: unknown backend name
            SQLAlchemyError: database unreachable and fallback disabled
        """
        backend = (backend or STUDENT_STORE).strip().lower()
        if backend not in cls._backends:
            raise ValueError(f"Unsupported student store backend: {backend}")

        if backend == "memory":
            log_with_context(logger, "INFO", "Using in-memory student store")
            return InMemoryStudentStore()

        bind = bind or default_engine
        try:
            create_tables(bind)
        except SQLAlchemyError as e:
            if not fallback:
                raise
            log_with_context(logger, "WARNING",
                             "Database unavailable, falling back to in-memory store (data will not be saved)",
                             extra_data={"error": str(e), "url": str(bind.url)})
            return InMemoryStudentStore()

        log_with_context(logger, "INFO", "Using SQL student store",
                         extra_data={"url": bind.url.render_as_string(hide_password=True)})
        return SqlStudentStore(build_session_factory(bind))

    @classmethod
    def available_backends(cls):
        return sorted(cls._backends)


def create_store(backend: str = None, bind: Optional[Engine] = None,
                 fallback: bool = True) -> StudentStore:
    """Shortcut for StudentStoreFactory.create()."""
    return StudentStoreFactory.create(backend, bind=bind, fallback=fallback)
