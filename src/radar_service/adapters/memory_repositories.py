"""In-memory repositories for local runs and tests."""

import itertools
import threading
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime

from radar_service.domain.errors import NotFoundError
from radar_service.domain.models import UserRecord
from radar_service.domain.radar import LocationRecord
from radar_service.services.geo import BoundingBox
from radar_service.services.radar import LocationRepository
from radar_service.services.users import UserRepository


@dataclass
class InMemoryLocationRepository(LocationRepository):
    """Location store keyed by user id.

    Writes for the same user are serialized by a per-user lock, so concurrent
    upserts can never leave two records for one user. When ``user_exists`` is
    set, the same lock makes the owner check and the write one step, like a
    foreign key.
    """

    records: dict[int, LocationRecord] = field(default_factory=dict)
    user_exists: Callable[[int], bool] | None = None
    _ids: itertools.count = field(default_factory=lambda: itertools.count(1))
    _locks: dict[int, threading.Lock] = field(default_factory=dict)
    _locks_guard: threading.Lock = field(default_factory=threading.Lock)

    def upsert_location(  # noqa: PLR0913
        self,
        user_id: int,
        latitude: float,
        longitude: float,
        is_active: bool,
        updated_at: datetime,
    ) -> LocationRecord:
        """Insert or replace the location for a user."""
        with self._lock_for(user_id):
            if self.user_exists is not None and not self.user_exists(user_id):
                raise NotFoundError("user not found")
            existing = self.records.get(user_id)
            if existing is None:
                record = LocationRecord(
                    id=next(self._ids),
                    user_id=user_id,
                    latitude=latitude,
                    longitude=longitude,
                    is_active=is_active,
                    created_at=updated_at,
                    updated_at=updated_at,
                )
            else:
                record = replace(
                    existing,
                    latitude=latitude,
                    longitude=longitude,
                    is_active=is_active,
                    updated_at=updated_at,
                )
            self.records[user_id] = record
            return record

    def list_active(self, box: BoundingBox | None = None) -> list[LocationRecord]:
        """Return active locations in id order."""
        snapshot = list(self.records.values())
        return sorted(
            (
                record
                for record in snapshot
                if record.is_active
                and (box is None or box.contains(record.latitude, record.longitude))
            ),
            key=lambda record: record.id,
        )

    def delete_with_owner(
        self, user_id: int, delete_owner: Callable[[], bool]
    ) -> bool:
        """Run the owner delete and drop its location under the user lock."""
        with self._lock_for(user_id):
            deleted = delete_owner()
            if deleted:
                self.records.pop(user_id, None)
        if deleted:
            with self._locks_guard:
                self._locks.pop(user_id, None)
        return deleted

    def _lock_for(self, user_id: int) -> threading.Lock:
        with self._locks_guard:
            lock = self._locks.get(user_id)
            if lock is None:
                lock = threading.Lock()
                self._locks[user_id] = lock
            return lock


@dataclass
class InMemoryUserRepository(UserRepository):
    """User store that cascades deletes into the location store."""

    locations: InMemoryLocationRepository | None = None
    users: dict[int, UserRecord] = field(default_factory=dict)
    _ids: itertools.count = field(default_factory=lambda: itertools.count(1))
    _lock: threading.Lock = field(default_factory=threading.Lock)

    def __post_init__(self) -> None:
        if self.locations is not None and self.locations.user_exists is None:
            self.locations.user_exists = self._has_user

    def create_user(self, email: str) -> UserRecord:
        """Create a new user and return it."""
        with self._lock:
            if any(user.email == email for user in self.users.values()):
                raise RuntimeError("duplicate key value violates unique constraint")
            now = datetime.now(tz=UTC)
            user = UserRecord(
                id=next(self._ids), email=email, created_at=now, updated_at=now
            )
            self.users[user.id] = user
            return user

    def get_user(self, user_id: int) -> UserRecord | None:
        """Return a user by id, if present."""
        return self.users.get(user_id)

    def get_by_email(self, email: str) -> UserRecord | None:
        """Return a user by email, if present."""
        for user in list(self.users.values()):
            if user.email == email:
                return user
        return None

    def list_users(self) -> list[UserRecord]:
        """Return all users, newest first."""
        return sorted(
            self.users.values(),
            key=lambda user: (user.created_at, user.id),
            reverse=True,
        )

    def delete_user(self, user_id: int) -> bool:
        """Delete a user and its location."""
        if self.locations is None:
            return self._pop_user(user_id)
        return self.locations.delete_with_owner(
            user_id, lambda: self._pop_user(user_id)
        )

    def get_emails(self, user_ids: list[int]) -> dict[int, str]:
        """Return emails keyed by user id."""
        return {
            user_id: self.users[user_id].email
            for user_id in user_ids
            if user_id in self.users
        }

    def ping(self) -> None:
        """The in-memory store is always reachable."""
        return None

    def _has_user(self, user_id: int) -> bool:
        return user_id in self.users

    def _pop_user(self, user_id: int) -> bool:
        with self._lock:
            return self.users.pop(user_id, None) is not None
