import pytest
from fastapi.testclient import TestClient
from sqlalchemy import event
from sqlalchemy.exc import OperationalError
from sqlalchemy.pool import StaticPool

from ecomm.config import Settings
from ecomm.database import Base, build_engine, build_session_factory
from ecomm.main import create_app
from ecomm.storer.context import CallContext
from ecomm.storer.sql_storer import SQLStorer


@pytest.fixture(scope="function")
def engine():
    """SQLite in-memory engine with a fresh schema for each test."""
    engine = build_engine("sqlite://", poolclass=StaticPool)
    Base.metadata.create_all(bind=engine)

    yield engine

    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def storer(engine):
    return SQLStorer(build_session_factory(engine))


@pytest.fixture(scope="function")
def ctx():
    return CallContext.background()


@pytest.fixture(scope="function")
def client(engine):
    """Create test client bound to the test engine."""
    app = create_app(settings=Settings(DATABASE_URL="sqlite://"), engine=engine)

    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture(scope="function")
def fail_statement(engine):
    """
    Make the n-th SQL statement starting with ``prefix`` fail with a
    database error, the way a rejected write would.
    """
    listeners = []

    def install(prefix: str, occurrence: int = 1):
        seen = {"count": 0}

        def before_cursor_execute(conn, cursor, statement, parameters, context, executemany):
            if statement.lstrip().upper().startswith(prefix.upper()):
                seen["count"] += 1
                if seen["count"] == occurrence:
                    raise OperationalError(statement, parameters, Exception("injected failure"))

        event.listen(engine, "before_cursor_execute", before_cursor_execute)
        listeners.append(before_cursor_execute)

    yield install

    for listener in listeners:
        event.remove(engine, "before_cursor_execute", listener)
