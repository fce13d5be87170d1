import pytest

from services.database import init_database
from services.session_store import SessionStore
from tests.helpers import FakeClock


@pytest.fixture
def session_factory(tmp_path):
    return init_database(f"sqlite:///{tmp_path / 'seraglio-test.db'}")


@pytest.fixture
def store(session_factory):
    return SessionStore(session_factory)


@pytest.fixture
def clock():
    return FakeClock()
