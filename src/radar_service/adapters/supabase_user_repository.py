"""Supabase-backed user repository."""

from dataclasses import dataclass
from datetime import datetime

from supabase import Client

from radar_service.domain.models import UserRecord
from radar_service.services.users import UserRepository

_COLUMNS = "id, email, created_at, updated_at"
# Keeps the id list of an in_ filter within URL length limits.
_EMAIL_BATCH_SIZE = 200


@dataclass
class SupabaseUserRepository(UserRepository):
    """Supabase implementation for user persistence."""

    client: Client
    email_batch_size: int = _EMAIL_BATCH_SIZE

    def create_user(self, email: str) -> UserRecord:
        """Create a new user row and return it."""
        response = self.client.table("users").insert({"email": email}).execute()
        if not response.data:
            raise RuntimeError("Failed to create user in Supabase")
        return _parse_user(response.data[0])

    def get_user(self, user_id: int) -> UserRecord | None:
        """Return a user by id, if present."""
        response = (
            self.client.table("users")
            .select(_COLUMNS)
            .eq("id", user_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_user(response.data[0])

    def get_by_email(self, email: str) -> UserRecord | None:
        """Return a user by email, if present."""
        response = (
            self.client.table("users")
            .select(_COLUMNS)
            .eq("email", email)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_user(response.data[0])

    def list_users(self) -> list[UserRecord]:
        """Return all users, newest first."""
        response = (
            self.client.table("users")
            .select(_COLUMNS)
            .order("created_at", desc=True)
            .execute()
        )
        return [_parse_user(row) for row in response.data or []]

    def delete_user(self, user_id: int) -> bool:
        """Delete a user; the location row is removed by the foreign key cascade."""
        response = self.client.table("users").delete().eq("id", user_id).execute()
        return bool(response.data)

    def get_emails(self, user_ids: list[int]) -> dict[int, str]:
        """Return emails keyed by user id, querying in batches."""
        ids = list(user_ids)
        emails: dict[int, str] = {}
        for start in range(0, len(ids), self.email_batch_size):
            response = (
                self.client.table("users")
                .select("id, email")
                .in_("id", ids[start : start + self.email_batch_size])
                .execute()
            )
            emails.update(
                {int(row["id"]): str(row["email"]) for row in response.data or []}
            )
        return emails

    def ping(self) -> None:
        """Run a trivial query to confirm the database is reachable."""
        self.client.table("users").select("id").limit(1).execute()


def _parse_user(row: dict[str, object]) -> UserRecord:
    """Parse a users row into a domain model."""
    return UserRecord(
        id=int(row["id"]),
        email=str(row["email"]),
        created_at=_parse_timestamp(row.get("created_at")),
        updated_at=_parse_timestamp(row.get("updated_at")),
    )


def _parse_timestamp(raw: object) -> datetime | None:
    if isinstance(raw, str) and raw:
        return datetime.fromisoformat(raw)
    return None
