"""Pydantic models for the HTTP API."""

from datetime import datetime

from pydantic import BaseModel, EmailStr, StrictBool, StrictFloat, StrictInt

from radar_service.domain.models import UserRecord
from radar_service.domain.radar import LocationRecord, NearbyResult


class CreateUserRequest(BaseModel):
    """Payload for registering a user."""

    email: EmailStr


class UpdateLocationRequest(BaseModel):
    """Payload for reporting a user's location.

    Ranges are checked by the radar service so every caller gets the same rules.
    """

    user_id: StrictInt
    latitude: StrictFloat | StrictInt
    longitude: StrictFloat | StrictInt
    is_active: StrictBool | None = None


class UserResponse(BaseModel):
    """User payload."""

    id: int
    email: str
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_record(cls, record: UserRecord) -> "UserResponse":
        return cls(
            id=record.id,
            email=record.email,
            created_at=record.created_at,
            updated_at=record.updated_at,
        )


class LocationResponse(BaseModel):
    """Stored location payload."""

    id: int
    user_id: int
    latitude: float
    longitude: float
    is_active: bool
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_record(cls, record: LocationRecord) -> "LocationResponse":
        return cls(
            id=record.id,
            user_id=record.user_id,
            latitude=record.latitude,
            longitude=record.longitude,
            is_active=record.is_active,
            created_at=record.created_at,
            updated_at=record.updated_at,
        )


class NearbyUserResponse(BaseModel):
    """A single nearby user."""

    user_id: int
    email: str
    latitude: float
    longitude: float
    distance_km: float
    last_update_at: datetime


class NearbyUsersResponse(BaseModel):
    """Result of a nearby users query."""

    count: int
    users: list[NearbyUserResponse]

    @classmethod
    def from_result(cls, result: NearbyResult) -> "NearbyUsersResponse":
        return cls(
            count=result.count,
            users=[
                NearbyUserResponse(
                    user_id=match.user_id,
                    email=match.email,
                    latitude=match.latitude,
                    longitude=match.longitude,
                    distance_km=match.distance_km,
                    last_update_at=match.last_update_at,
                )
                for match in result.users
            ],
        )
