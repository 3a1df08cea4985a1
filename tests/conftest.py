import pytest
from fastapi.testclient import TestClient

from progress_api.config import Settings
from progress_api.db import make_engine
from progress_api.main import create_app
from progress_api.memory_store import MemoryProgressStore
from progress_api.store import SqlProgressStore
from progress_api.tracker import ProgressTracker


@pytest.fixture
def offline_settings():
    return Settings(offline_mode=True)


@pytest.fixture
def online_settings():
    return Settings(offline_mode=False, database_url="sqlite://")


@pytest.fixture
def memory_store():
    return MemoryProgressStore()


@pytest.fixture
def sql_store(online_settings):
    return SqlProgressStore(
        make_engine(online_settings.database_url),
        default_user_id=online_settings.default_user_id,
    )


@pytest.fixture
def offline_tracker(memory_store, offline_settings):
    return ProgressTracker(memory_store, offline_settings)


@pytest.fixture
def online_tracker(sql_store, online_settings):
    return ProgressTracker(sql_store, online_settings)


@pytest.fixture
def offline_client(offline_settings, memory_store):
    return TestClient(create_app(offline_settings, store=memory_store))


@pytest.fixture
def online_client(online_settings, sql_store):
    return TestClient(create_app(online_settings, store=sql_store))
