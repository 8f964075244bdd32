"""Tests for container wiring."""

import pytest

from radar_service.adapters.memory_repositories import InMemoryLocationRepository
from radar_service.config import Settings, parse_allowed_origins
from radar_service.containers import build_container


def test_build_container_with_memory_backend(settings) -> None:
    container = build_container(settings)

    assert isinstance(container.radar_service.repository, InMemoryLocationRepository)
    assert container.radar_service.users is container.user_service


def test_build_container_requires_supabase_credentials() -> None:
    with pytest.raises(ValueError, match="SUPABASE_URL"):
        build_container(Settings(storage_backend="supabase", supabase_url=None))


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        (None, []),
        ("*", ["*"]),
        ("http://a.test, http://b.test,", ["http://a.test", "http://b.test"]),
    ],
)
def test_parse_allowed_origins(raw, expected) -> None:
    assert parse_allowed_origins(raw) == expected
