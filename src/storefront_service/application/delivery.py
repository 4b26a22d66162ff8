import structlog

from storefront_service.application.ports import ServiceAreaSource
from storefront_service.domain.exceptions import ServiceAreaFetchError
from storefront_service.domain.geo import ensure_valid_coordinates, find_nearest_area, validate_delivery
from storefront_service.domain.models import DeliveryCheckResult, NearestAreaResult, ServiceArea
from storefront_service.infrastructure.metrics import DELIVERY_CHECKS_TOTAL


logger = structlog.get_logger()


class DeliveryService:
    """Checks delivery coordinates against the configured service areas."""

    def __init__(self, area_source: ServiceAreaSource) -> None:
        self._area_source = area_source

    async def load_areas(self) -> list[ServiceArea]:
        """Load areas, treating a failed fetch as an empty configuration."""
        try:
            return await self._area_source.get_service_areas()
        except ServiceAreaFetchError as e:
            logger.warning("service_areas_unavailable", error=str(e))
            return []

    async def check_availability(self, lat: float, lng: float) -> DeliveryCheckResult:
        ensure_valid_coordinates(lat, lng)
        areas = await self.load_areas()
        result = validate_delivery(lat, lng, areas)

        DELIVERY_CHECKS_TOTAL.labels(available=str(result.available).lower()).inc()
        logger.info(
            "delivery_checked",
            lat=lat,
            lng=lng,
            areas=len(areas),
            available=result.available,
            matched_area=result.matched_area.name if result.matched_area else None,
        )
        return result

    async def nearest_area(self, lat: float, lng: float) -> NearestAreaResult | None:
        ensure_valid_coordinates(lat, lng)
        areas = await self.load_areas()
        nearest = find_nearest_area(lat, lng, areas)
        if nearest:
            logger.info(
                "nearest_area_found",
                area=nearest.area.name,
                distance_meters=round(nearest.distance_meters, 2),
                in_radius=nearest.in_radius,
            )
        return nearest
