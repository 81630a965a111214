"""Great-circle distance and radius matching.

Everything here is pure: no I/O, no shared state, safe to call from any
number of concurrent requests.
"""

import math
from typing import Iterable, Sequence

from pydantic import ValidationError as PydanticValidationError

from donor_locator.errors import ValidationError
from donor_locator.models import Donor, DonorMatch, GeoPoint

EARTH_RADIUS_KM = 6371.0
DEFAULT_RADIUS_KM = 15.0


def great_circle_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Distance in kilometers between two points given in decimal degrees.

    Uses the spherical law of cosines. Rounding can push the cosine slightly
    past 1.0 for nearby points, so it is clamped before ``acos``.
    """
    if lat1 == lat2 and lon1 == lon2:
        return 0.0

    phi1, lam1, phi2, lam2 = map(math.radians, (lat1, lon1, lat2, lon2))
    cos_angle = (
        math.cos(phi1) * math.cos(phi2) * math.cos(lam2 - lam1)
        + math.sin(phi1) * math.sin(phi2)
    )
    cos_angle = max(-1.0, min(1.0, cos_angle))
    return EARTH_RADIUS_KM * math.acos(cos_angle)


def validate_origin(origin: Sequence[float]) -> GeoPoint:
    """Check a ``(latitude, longitude)`` pair and return it as a :class:`GeoPoint`."""
    if isinstance(origin, GeoPoint):
        return origin
    try:
        latitude, longitude = origin
    except (TypeError, ValueError):
        raise ValidationError("Origin must be a (latitude, longitude) pair.") from None
    if isinstance(latitude, bool) or isinstance(longitude, bool):
        raise ValidationError("Origin coordinates must be numbers.")
    try:
        return GeoPoint(latitude=latitude, longitude=longitude)
    except PydanticValidationError as exc:
        raise ValidationError.from_pydantic(exc, "Origin coordinates are missing or out of range.") from exc


def _check_radius(radius_km: float) -> float:
    if (
        isinstance(radius_km, bool)
        or not isinstance(radius_km, (int, float))
        or not math.isfinite(radius_km)
        or radius_km <= 0
    ):
        raise ValidationError(f"Search radius must be a positive number of kilometers, got {radius_km!r}.")
    return float(radius_km)


def match(
    origin: Sequence[float],
    candidates: Iterable[Donor],
    radius_km: float = DEFAULT_RADIUS_KM,
) -> list[DonorMatch]:
    """Donors strictly closer than *radius_km* to *origin*, nearest first.

    Candidates at the same distance keep their input order.
    """
    point = validate_origin(origin)
    radius = _check_radius(radius_km)

    within: list[tuple[Donor, float]] = []
    for donor in candidates:
        distance = great_circle_distance(point.latitude, point.longitude, donor.latitude, donor.longitude)
        if distance < radius:
            within.append((donor, distance))

    # list.sort is stable
    within.sort(key=lambda item: item[1])
    return [DonorMatch.from_donor(donor, distance) for donor, distance in within]
