"""Domain models for the radar service."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class UserRecord:
    """Represents a user stored in the database."""

    id: int
    email: str
    created_at: datetime | None = None
    updated_at: datetime | None = None
