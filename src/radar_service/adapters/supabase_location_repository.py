"""Supabase implementation for user locations."""

from dataclasses import dataclass
from datetime import datetime

from supabase import Client

from radar_service.domain.radar import LocationRecord
from radar_service.services.geo import BoundingBox
from radar_service.services.radar import LocationRepository

_TABLE = "user_radar"
# Must not exceed the PostgREST max_rows setting (1000 by default).
_PAGE_SIZE = 1000


@dataclass
class SupabaseLocationRepository(LocationRepository):
    """Supabase-backed repository for the user radar table."""

    client: Client
    page_size: int = _PAGE_SIZE

    def upsert_location(  # noqa: PLR0913
        self,
        user_id: int,
        latitude: float,
        longitude: float,
        is_active: bool,
        updated_at: datetime,
    ) -> LocationRecord:
        """Insert or replace a user's location with INSERT ... ON CONFLICT."""
        response = (
            self.client.table(_TABLE)
            .upsert(
                {
                    "user_id": user_id,
                    "latitude": latitude,
                    "longitude": longitude,
                    "is_active": is_active,
                    "updated_at": updated_at.isoformat(),
                },
                on_conflict="user_id",
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to upsert location")
        return _parse_location(response.data[0])

    def list_active(self, box: BoundingBox | None = None) -> list[LocationRecord]:
        """Return active locations inside the bounding box.

        Pages through the table by user id until a short page comes back, so
        the server row cap never truncates the candidates.
        """
        records: list[LocationRecord] = []
        start = 0
        while True:
            response = (
                self._active_query(box)
                .order("user_id")
                .range(start, start + self.page_size - 1)
                .execute()
            )
            rows = response.data or []
            records.extend(_parse_location(row) for row in rows)
            if len(rows) < self.page_size:
                return records
            start += self.page_size

    def _active_query(self, box: BoundingBox | None):  # type: ignore[no-untyped-def]
        query = self.client.table(_TABLE).select("*").eq("is_active", True)
        if box is not None:
            query = query.gte("latitude", box.min_lat).lte("latitude", box.max_lat)
            if box.min_lon is not None and box.max_lon is not None:
                query = query.gte("longitude", box.min_lon).lte(
                    "longitude", box.max_lon
                )
        return query


def _parse_location(row: dict[str, object]) -> LocationRecord:
    """Parse a user_radar row into a domain model."""
    return LocationRecord(
        id=int(row["id"]),
        user_id=int(row["user_id"]),
        latitude=float(row["latitude"]),
        longitude=float(row["longitude"]),
        is_active=bool(row.get("is_active", True)),
        created_at=datetime.fromisoformat(str(row["created_at"])),
        updated_at=datetime.fromisoformat(str(row["updated_at"])),
    )
