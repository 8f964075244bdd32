"""Domain models for user locations and proximity results."""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class LocationRecord:
    """The single current location of one user."""

    id: int
    user_id: int
    latitude: float
    longitude: float
    is_active: bool
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class NearbyMatch:
    """An active user found within a proximity query radius."""

    user_id: int
    email: str
    latitude: float
    longitude: float
    distance_km: float
    last_update_at: datetime


@dataclass(frozen=True)
class NearbyResult:
    """Ordered matches of a proximity query."""

    users: list[NearbyMatch] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.users)
