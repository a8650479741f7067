"""Persistence adapters built on SQLAlchemy async."""

from tenantgate.infrastructure.persistence.database import (
    Base,
    DatabaseManager,
    close_database,
    get_db_manager,
    get_db_session,
    init_database,
)

__all__ = [
    "Base",
    "DatabaseManager",
    "close_database",
    "get_db_manager",
    "get_db_session",
    "init_database",
]
