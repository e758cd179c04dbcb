import pytest

from fakes import FakeSession


@pytest.fixture
def session() -> FakeSession:
    return FakeSession()
