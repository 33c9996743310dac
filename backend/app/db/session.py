"""Database engine and session factory. SQLite for local/tests, PostgreSQL in production.

The factory is built once at startup and kept on ``app.state``; request
handlers receive a ``Session`` from it through ``app.api.deps.get_db``.
"""
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import NullPool


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # SQLite ignores REFERENCES clauses unless this is set per connection
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_db_engine(database_url: str, **engine_kwargs) -> Engine:
    """Create an engine with pooling suited to the backend in use."""
    if database_url.startswith("sqlite"):
        engine_kwargs.setdefault("connect_args", {"check_same_thread": False})
        # SQLite: Use NullPool for thread-safety
        engine_kwargs.setdefault("poolclass", NullPool)
        engine = create_engine(database_url, **engine_kwargs)
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
        return engine

    # PostgreSQL/MySQL: Use QueuePool with sensible defaults
    engine_kwargs.setdefault("pool_size", 5)
    engine_kwargs.setdefault("max_overflow", 10)
    engine_kwargs.setdefault("pool_timeout", 30)
    engine_kwargs.setdefault("pool_recycle", 3600)
    engine_kwargs.setdefault("pool_pre_ping", True)
    return create_engine(database_url, **engine_kwargs)


def create_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)
