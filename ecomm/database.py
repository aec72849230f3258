from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

# Base class for models
Base = declarative_base()


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(url: str, pool_size: int = 10, max_overflow: int = 20, **kwargs) -> Engine:
    """
    Create a SQLAlchemy engine for the given database URL.

    Server databases get a connection pool; SQLite gets cross-thread access
    and foreign key enforcement, which it leaves off by default.
    """
    if url.startswith("sqlite"):
        kwargs.setdefault("connect_args", {"check_same_thread": False})
        engine = create_engine(url, **kwargs)
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
        return engine

    return create_engine(
        url,
        pool_size=pool_size,
        max_overflow=max_overflow,
        pool_pre_ping=True,
        **kwargs,
    )


def build_session_factory(engine: Engine) -> sessionmaker:
    # Records handed back to callers must stay readable after commit
    return sessionmaker(
        bind=engine,
        autoflush=False,
        expire_on_commit=False,
    )
