"""Dependency container wiring for the application."""

from dataclasses import dataclass

from supabase import create_client

from radar_service.adapters.memory_repositories import (
    InMemoryLocationRepository,
    InMemoryUserRepository,
)
from radar_service.adapters.supabase_location_repository import (
    SupabaseLocationRepository,
)
from radar_service.adapters.supabase_user_repository import SupabaseUserRepository
from radar_service.config import Settings
from radar_service.services.radar import LocationRepository, RadarService
from radar_service.services.users import UserRepository, UserService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    user_service: UserService
    radar_service: RadarService


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    user_repository: UserRepository
    location_repository: LocationRepository
    if resolved_settings.storage_backend == "memory":
        location_repository = InMemoryLocationRepository()
        user_repository = InMemoryUserRepository(locations=location_repository)
    else:
        if not (
            resolved_settings.supabase_url and resolved_settings.supabase_service_key
        ):
            raise ValueError(
                "SUPABASE_URL and SUPABASE_SERVICE_KEY are required "
                "for the supabase storage backend"
            )
        supabase_client = create_client(
            resolved_settings.supabase_url, resolved_settings.supabase_service_key
        )
        user_repository = SupabaseUserRepository(supabase_client)
        location_repository = SupabaseLocationRepository(supabase_client)

    user_service = UserService(user_repository)
    radar_service = RadarService(repository=location_repository, users=user_service)

    return AppContainer(
        settings=resolved_settings,
        user_service=user_service,
        radar_service=radar_service,
    )
