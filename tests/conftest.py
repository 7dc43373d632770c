from __future__ import annotations

import pytest

from rover_service.main import create_app
from rover_service.repositories.checkpoints import CheckpointRepository
from rover_service.services.coordinator import OperationCoordinator
from rover_service.services.dependencies import Overrides
from rover_service.services.endpoint import AnalysisEndpointResolver
from rover_service.settings import Settings

from tests.utils import FakeAnalyzer, FakeRoverRepository, InMemoryStateStore

ANALYSIS_URL = "http://analysis.test/data"


@pytest.fixture
def state_store() -> InMemoryStateStore:
    return InMemoryStateStore()


@pytest.fixture
def rover_repo() -> FakeRoverRepository:
    return FakeRoverRepository(statuses={42: "1", 7: "2", 8: "3", 9: "77"})


@pytest.fixture
def analyzer() -> FakeAnalyzer:
    return FakeAnalyzer()


@pytest.fixture
def coordinator(rover_repo, state_store, analyzer) -> OperationCoordinator:
    return OperationCoordinator(
        rover_repo,
        CheckpointRepository(state_store),
        analyzer,
        AnalysisEndpointResolver(ANALYSIS_URL),
    )


@pytest.fixture
def app_settings() -> Settings:
    return Settings(
        _env_file=None,
        analysis_service_url=ANALYSIS_URL,
        analysis_url_key="config:analysis_url",
        checkpoint_ttl_sec=600,
    )


@pytest.fixture
async def service_client(aiohttp_client, app_settings, rover_repo, state_store, analyzer):
    app = create_app(
        app_settings,
        Overrides(rover_repo=rover_repo, state_store=state_store, analysis_client=analyzer),
    )
    return await aiohttp_client(app)
