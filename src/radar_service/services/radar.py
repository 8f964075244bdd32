"""Location upserts and proximity queries."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Protocol

from radar_service.domain.errors import NotFoundError, StorageError, ValidationError
from radar_service.domain.radar import LocationRecord, NearbyMatch, NearbyResult
from radar_service.services.geo import (
    BoundingBox,
    bounding_box,
    filter_within,
    validate_coordinates,
    validate_radius,
)

logger = logging.getLogger(__name__)


class LocationRepository(Protocol):
    """Persistence interface for user locations."""

    def upsert_location(  # noqa: PLR0913
        self,
        user_id: int,
        latitude: float,
        longitude: float,
        is_active: bool,
        updated_at: datetime,
    ) -> LocationRecord:
        """Insert or replace the location for a user in one atomic write."""

    def list_active(self, box: BoundingBox | None = None) -> list[LocationRecord]:
        """Return active locations, optionally limited to a bounding box."""


class UserDirectory(Protocol):
    """User lookups the radar relies on."""

    def exists(self, user_id: int) -> bool:
        """Return True when the user is registered."""

    def emails_of(self, user_ids: list[int]) -> dict[int, str]:
        """Return emails keyed by user id."""


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class RadarService:
    """Application service for the location radar."""

    repository: LocationRepository
    users: UserDirectory
    clock: Callable[[], datetime] = field(default=_utc_now)

    def upsert_location(
        self,
        user_id: object,
        latitude: object,
        longitude: object,
        is_active: object = None,
    ) -> LocationRecord:
        """Create or replace the single location record of a user."""
        if isinstance(user_id, bool) or not isinstance(user_id, int):
            raise ValidationError("user_id must be an integer")
        lat, lon = validate_coordinates(latitude, longitude)
        if is_active is None:
            is_active = True
        elif not isinstance(is_active, bool):
            raise ValidationError("is_active must be a boolean")

        if not self.users.exists(user_id):
            raise NotFoundError("user not found")

        try:
            record = self.repository.upsert_location(
                user_id=user_id,
                latitude=lat,
                longitude=lon,
                is_active=is_active,
                updated_at=self.clock(),
            )
        except NotFoundError:
            # Owner removed after the existence check.
            raise
        except Exception as exc:
            logger.exception("Failed to update location", extra={"user_id": user_id})
            raise StorageError("failed to update location") from exc
        logger.info(
            "Location updated",
            extra={"user_id": user_id, "is_active": record.is_active},
        )
        return record

    def find_active_within(
        self, latitude: object, longitude: object, radius_km: object
    ) -> NearbyResult:
        """Return active users within ``radius_km`` of a point, nearest first."""
        lat, lon = validate_coordinates(latitude, longitude)
        radius = validate_radius(radius_km)
        box = bounding_box(lat, lon, radius)

        try:
            candidates = self.repository.list_active(box)
        except Exception as exc:
            logger.exception("Failed to fetch nearby users")
            raise StorageError("failed to fetch nearby users") from exc
        matches = filter_within(lat, lon, radius, candidates)
        emails = self.users.emails_of([record.user_id for record, _ in matches])

        users: list[NearbyMatch] = []
        for record, distance in matches:
            email = emails.get(record.user_id)
            if email is None:
                # User deleted between the two lookups.
                continue
            users.append(
                NearbyMatch(
                    user_id=record.user_id,
                    email=email,
                    latitude=record.latitude,
                    longitude=record.longitude,
                    distance_km=distance,
                    last_update_at=record.updated_at,
                )
            )
        logger.debug(
            "Nearby query",
            extra={
                "latitude": lat,
                "longitude": lon,
                "radius_km": radius,
                "candidates": len(candidates),
                "matches": len(users),
            },
        )
        return NearbyResult(users=users)
