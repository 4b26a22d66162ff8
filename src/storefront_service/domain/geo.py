import math
from collections.abc import Sequence

from storefront_service.domain.exceptions import InvalidCoordinatesError
from storefront_service.domain.models import DeliveryCheckResult, NearestAreaResult, ServiceArea


EARTH_RADIUS_METERS = 6_371_000


def haversine_distance_meters(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    start_lat = math.radians(lat1)
    end_lat = math.radians(lat2)
    delta_lat = math.radians(lat2 - lat1)
    delta_lng = math.radians(lng2 - lng1)

    a = math.sin(delta_lat / 2) ** 2 + math.cos(start_lat) * math.cos(end_lat) * math.sin(delta_lng / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_METERS * c


def ensure_valid_coordinates(lat: float, lng: float) -> None:
    if not (math.isfinite(lat) and math.isfinite(lng)):
        raise InvalidCoordinatesError(lat, lng)
    if not -90 <= lat <= 90 or not -180 <= lng <= 180:
        raise InvalidCoordinatesError(lat, lng)


def distance_to_area(lat: float, lng: float, area: ServiceArea) -> float:
    return haversine_distance_meters(lat, lng, area.latitude, area.longitude)


def validate_delivery(lat: float, lng: float, areas: Sequence[ServiceArea]) -> DeliveryCheckResult:
    """Return the first area whose circle contains the point.

    The boundary is inclusive: a point exactly ``radius_meters`` away is inside.
    Overlapping areas resolve to whichever comes first in ``areas``.
    """
    ensure_valid_coordinates(lat, lng)

    for area in areas:
        distance = distance_to_area(lat, lng, area)
        if distance <= area.radius_meters:
            return DeliveryCheckResult(available=True, matched_area=area, distance_meters=distance)

    return DeliveryCheckResult(available=False)


def find_nearest_area(lat: float, lng: float, areas: Sequence[ServiceArea]) -> NearestAreaResult | None:
    ensure_valid_coordinates(lat, lng)

    nearest: NearestAreaResult | None = None
    for area in areas:
        distance = distance_to_area(lat, lng, area)
        if nearest is None or distance < nearest.distance_meters:
            nearest = NearestAreaResult(
                area=area,
                distance_meters=distance,
                in_radius=distance <= area.radius_meters,
            )
    return nearest
