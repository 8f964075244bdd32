"""Great-circle distance and radius filtering."""

import math
from collections.abc import Iterable
from dataclasses import dataclass

from radar_service.domain.errors import ValidationError
from radar_service.domain.radar import LocationRecord

EARTH_RADIUS_KM = 6371.0
MIN_LATITUDE, MAX_LATITUDE = -90.0, 90.0
MIN_LONGITUDE, MAX_LONGITUDE = -180.0, 180.0

# Widens the prefilter box so float rounding never drops a boundary point.
_BOX_PADDING_DEG = 1e-6


@dataclass(frozen=True)
class BoundingBox:
    """Coordinate ranges that fully contain a radius circle.

    ``min_lon``/``max_lon`` are ``None`` when the circle wraps the antimeridian
    or reaches a pole, in which case every longitude has to be considered.
    """

    min_lat: float
    max_lat: float
    min_lon: float | None = None
    max_lon: float | None = None

    def contains(self, latitude: float, longitude: float) -> bool:
        """Return True when the point lies inside the box."""
        if not self.min_lat <= latitude <= self.max_lat:
            return False
        if self.min_lon is None or self.max_lon is None:
            return True
        return self.min_lon <= longitude <= self.max_lon


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance between two points in kilometers."""
    rlat1, rlon1 = math.radians(lat1), math.radians(lon1)
    rlat2, rlon2 = math.radians(lat2), math.radians(lon2)
    dlat = rlat2 - rlat1
    dlon = rlon2 - rlon1
    a = (
        math.sin(dlat / 2) ** 2
        + math.cos(rlat1) * math.cos(rlat2) * math.sin(dlon / 2) ** 2
    )
    # Clamp rounding noise for antipodal points.
    a = min(1.0, max(0.0, a))
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def validate_coordinates(latitude: object, longitude: object) -> tuple[float, float]:
    """Return the coordinates as floats or raise ValidationError."""
    lat = _coerce_number("latitude", latitude)
    lon = _coerce_number("longitude", longitude)
    if not MIN_LATITUDE <= lat <= MAX_LATITUDE:
        raise ValidationError(
            f"latitude must be between {MIN_LATITUDE:g} and {MAX_LATITUDE:g}"
        )
    if not MIN_LONGITUDE <= lon <= MAX_LONGITUDE:
        raise ValidationError(
            f"longitude must be between {MIN_LONGITUDE:g} and {MAX_LONGITUDE:g}"
        )
    return lat, lon


def validate_radius(radius_km: object) -> float:
    """Return the radius as a float or raise ValidationError."""
    radius = _coerce_number("radius", radius_km)
    if radius < 0:
        raise ValidationError("radius must be greater than or equal to 0")
    return radius


def bounding_box(latitude: float, longitude: float, radius_km: float) -> BoundingBox:
    """Return a box that contains every point within ``radius_km``."""
    angular = radius_km / EARTH_RADIUS_KM
    dlat = math.degrees(angular) + _BOX_PADDING_DEG
    min_lat = latitude - dlat
    max_lat = latitude + dlat
    if min_lat <= MIN_LATITUDE or max_lat >= MAX_LATITUDE:
        return BoundingBox(
            min_lat=max(min_lat, MIN_LATITUDE), max_lat=min(max_lat, MAX_LATITUDE)
        )

    dlon = (
        math.degrees(math.asin(math.sin(angular) / math.cos(math.radians(latitude))))
        + _BOX_PADDING_DEG
    )
    min_lon = longitude - dlon
    max_lon = longitude + dlon
    if min_lon < MIN_LONGITUDE or max_lon > MAX_LONGITUDE:
        return BoundingBox(min_lat=min_lat, max_lat=max_lat)
    return BoundingBox(min_lat=min_lat, max_lat=max_lat, min_lon=min_lon, max_lon=max_lon)


def filter_within(
    latitude: float,
    longitude: float,
    radius_km: float,
    candidates: Iterable[LocationRecord],
) -> list[tuple[LocationRecord, float]]:
    """Keep active candidates within the radius, nearest first.

    Ties on distance are ordered by user id so results are deterministic.
    """
    matches: list[tuple[LocationRecord, float]] = []
    for record in candidates:
        if not record.is_active:
            continue
        distance = haversine_km(latitude, longitude, record.latitude, record.longitude)
        if distance <= radius_km:
            matches.append((record, distance))
    matches.sort(key=lambda item: (item[1], item[0].user_id))
    return matches


def _coerce_number(name: str, value: object) -> float:
    if isinstance(value, bool) or not isinstance(value, int | float):
        raise ValidationError(f"{name} must be a number")
    number = float(value)
    if not math.isfinite(number):
        raise ValidationError(f"{name} must be a finite number")
    return number
