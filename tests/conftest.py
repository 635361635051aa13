from datetime import date, datetime

import pytest

from preferences import InMemoryPreferenceStore


@pytest.fixture
def today() -> date:
    return date(2024, 10, 19)


@pytest.fixture
def now() -> datetime:
    return datetime(2024, 10, 19, 12, 0)


@pytest.fixture
def store() -> InMemoryPreferenceStore:
    return InMemoryPreferenceStore()
