"""User directory business logic."""

import logging
from dataclasses import dataclass
from typing import Protocol

from radar_service.domain.errors import ConflictError, NotFoundError, StorageError
from radar_service.domain.models import UserRecord

logger = logging.getLogger(__name__)


class UserRepository(Protocol):
    """Persistence interface for user data."""

    def create_user(self, email: str) -> UserRecord:
        """Create and return a new user record."""

    def get_user(self, user_id: int) -> UserRecord | None:
        """Return a user by id, if present."""

    def get_by_email(self, email: str) -> UserRecord | None:
        """Return a user by email, if present."""

    def list_users(self) -> list[UserRecord]:
        """Return all users, newest first."""

    def delete_user(self, user_id: int) -> bool:
        """Delete a user and its location; return False when nothing was deleted."""

    def get_emails(self, user_ids: list[int]) -> dict[int, str]:
        """Return emails keyed by user id for the users that exist."""

    def ping(self) -> None:
        """Raise when the backing store is unreachable."""


@dataclass
class UserService:
    """Application service for user lifecycle actions.

    Also serves as the user directory consumed by the radar service
    (``exists`` and ``email_of``).
    """

    repository: UserRepository

    def create_user(self, email: str) -> UserRecord:
        """Register a new user, rejecting duplicate emails."""
        normalized = email.strip().lower()
        if self._call(self.repository.get_by_email, normalized) is not None:
            raise ConflictError("email already registered")
        user = self._call(self.repository.create_user, normalized)
        logger.info("Created user", extra={"user_id": user.id})
        return user

    def get_user(self, user_id: int) -> UserRecord:
        """Return a user or raise NotFoundError."""
        user = self._call(self.repository.get_user, user_id)
        if user is None:
            raise NotFoundError("user not found")
        return user

    def list_users(self) -> list[UserRecord]:
        """Return all users, newest first."""
        return self._call(self.repository.list_users)

    def delete_user(self, user_id: int) -> None:
        """Delete a user; its location record goes with it."""
        if not self._call(self.repository.delete_user, user_id):
            raise NotFoundError("user not found")
        logger.info("Deleted user", extra={"user_id": user_id})

    def exists(self, user_id: int) -> bool:
        """Return True when the user id refers to a registered user."""
        return self._call(self.repository.get_user, user_id) is not None

    def email_of(self, user_id: int) -> str | None:
        """Return the email for a user id, if the user exists."""
        return self.emails_of([user_id]).get(user_id)

    def emails_of(self, user_ids: list[int]) -> dict[int, str]:
        """Return emails for many users in one lookup."""
        if not user_ids:
            return {}
        return self._call(self.repository.get_emails, user_ids)

    def ping(self) -> None:
        """Raise StorageError when the user store is unreachable."""
        self._call(self.repository.ping)

    @staticmethod
    def _call(operation, *args):  # type: ignore[no-untyped-def]
        try:
            return operation(*args)
        except Exception as exc:
            logger.exception("User repository call failed")
            raise StorageError("failed to access users") from exc
