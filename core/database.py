"""
core/database.py -- Engine factory shared by auth/store.py and profiles/store.py.

Both stores accept a SQLAlchemy URL and build their engine through
create_db_engine() so SQLite gets the same connection settings everywhere.
Swapping SQLite for PostgreSQL is a DATABASE_URL change.
"""

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine

# Largest value an INTEGER primary key can hold (signed 64-bit). Ids outside
# 1..MAX_RECORD_ID cannot name a row and are rejected before they reach a driver.
MAX_RECORD_ID = 2**63 - 1


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode for concurrent read safety.

    Set per-connection because SQLite PRAGMAs are not inherited by new
    connections from the pool.
    """
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


def create_db_engine(db_url: str) -> Engine:
    """Return an Engine for db_url with SQLite threading and WAL configured.

    check_same_thread=False is required because FastAPI runs sync route
    handlers in a worker thread pool.
    """
    connect_args: dict = {}
    is_sqlite = db_url.startswith("sqlite")
    if is_sqlite:
        connect_args["check_same_thread"] = False
    engine = create_engine(db_url, connect_args=connect_args)
    if is_sqlite:
        event.listen(engine, "connect", _set_wal_mode)
    return engine
