import os
import signal
import sys
from pathlib import Path

import pytest
from peewee import SqliteDatabase

# Force tests to use in-memory SQLite by default to avoid touching any real DB.
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

# ensure project root is on sys.path when running tests
sys.path.append(str(Path(__file__).resolve().parent))

from database.db import db
from database.init import ALL_MODELS

_TEST_TIMEOUT = int(os.environ.get("PYTEST_TIMEOUT", "60"))


@pytest.fixture(autouse=True)
def watchdog():
    """Fail a test if it hangs longer than the timeout."""
    if not hasattr(signal, "SIGALRM"):
        yield
        return

    def handler(signum, frame):  # pragma: no cover - timeout handler
        pytest.fail("Test timeout exceeded", pytrace=False)

    signal.signal(signal.SIGALRM, handler)
    signal.alarm(_TEST_TIMEOUT)
    try:
        yield
    finally:
        signal.alarm(0)


def _test_database() -> SqliteDatabase:
    # If db is not initialized yet, bind it to a fresh in-memory DB shared
    # between threads (TestClient runs sync endpoints in a threadpool).
    test_db = getattr(db, "obj", None)
    if test_db is None:
        test_db = SqliteDatabase(
            ":memory:",
            pragmas={"foreign_keys": 1},
            thread_safe=False,
            check_same_thread=False,
        )
        db.initialize(test_db)
    elif not (isinstance(test_db, SqliteDatabase) and test_db.database == ":memory:"):
        # Safety guard: never run tests against a non in-memory database.
        raise RuntimeError("Refusing to run tests on a non in-memory database")
    return test_db


@pytest.fixture()
def in_memory_db():
    test_db = _test_database()
    test_db.create_tables(ALL_MODELS)
    try:
        yield test_db
    finally:
        test_db.drop_tables(ALL_MODELS)


@pytest.fixture()
def db_transaction(in_memory_db):
    yield in_memory_db
