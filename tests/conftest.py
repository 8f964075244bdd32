"""Shared test fixtures."""

from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

import pytest

from radar_service.adapters.memory_repositories import (
    InMemoryLocationRepository,
    InMemoryUserRepository,
)
from radar_service.config import Settings
from radar_service.containers import AppContainer
from radar_service.services.radar import RadarService
from radar_service.services.users import UserService

BERLIN = (52.5200, 13.4050)
MUNICH = (48.1351, 11.5820)
HAMBURG = (53.5511, 9.9937)


@dataclass
class FakeClock:
    """Clock that advances by a fixed step on every call."""

    current: datetime = field(
        default_factory=lambda: datetime(2024, 1, 1, 12, 0, tzinfo=UTC)
    )
    step: timedelta = timedelta(seconds=1)

    def __call__(self) -> datetime:
        self.current += self.step
        return self.current


@pytest.fixture
def settings() -> Settings:
    return Settings(
        storage_backend="memory",
        allowed_origins="http://localhost:3000",
        environment="test",
    )


@pytest.fixture
def location_repository() -> InMemoryLocationRepository:
    return InMemoryLocationRepository()


@pytest.fixture
def user_repository(
    location_repository: InMemoryLocationRepository,
) -> InMemoryUserRepository:
    return InMemoryUserRepository(locations=location_repository)


@pytest.fixture
def user_service(user_repository: InMemoryUserRepository) -> UserService:
    return UserService(user_repository)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def radar_service(
    location_repository: InMemoryLocationRepository,
    user_service: UserService,
    clock: FakeClock,
) -> RadarService:
    return RadarService(repository=location_repository, users=user_service, clock=clock)


@pytest.fixture
def container(
    settings: Settings,
    user_service: UserService,
    radar_service: RadarService,
) -> AppContainer:
    return AppContainer(
        settings=settings,
        user_service=user_service,
        radar_service=radar_service,
    )
