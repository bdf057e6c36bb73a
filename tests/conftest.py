"""
Global test configuration for unigate.

Ensures ``src/`` is on *sys.path* so the tests run from a plain checkout, and
provides shared fixtures: an isolated in-memory database per test and a fixed clock.
"""

import datetime
import pathlib
import sys

import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

ROOT = pathlib.Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from unigate.dbutils.dbmanager import DBManager  # noqa: E402
from unigate.registry import ModelRegistry  # noqa: E402


class FakeClock:
    """Clock with a pinned wall time and a counter in place of the monotonic clock."""

    def __init__(self, moment=None, start_ns=1_000):
        self.moment = moment or datetime.datetime(2024, 1, 1, 12, 0, 0, tzinfo=datetime.timezone.utc)
        self._ns = start_ns

    def now(self):
        return self.moment

    def monotonic_ns(self):
        self._ns += 1
        return self._ns


@pytest.fixture
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    with DBManager(eng) as db:
        db.create_all()
    yield eng
    eng.dispose()


@pytest.fixture
def registry(engine):
    return ModelRegistry(lambda: DBManager(engine))


@pytest.fixture
def clock():
    return FakeClock()
