from .async_db import (
    check_database_health,
    create_async_db_and_tables,
    dispose_engine,
    get_async_db,
    get_engine,
    get_session_factory,
)
from .unit_of_work import UnitOfWork

__all__ = [
    "UnitOfWork",
    "check_database_health",
    "create_async_db_and_tables",
    "dispose_engine",
    "get_async_db",
    "get_engine",
    "get_session_factory",
]
