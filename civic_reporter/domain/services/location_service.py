"""
Location helpers for the report form.

The device location collaborator can fail (permission denied, no fix).
That is not an error for the core: it just means no auto location, and the
caller should offer manual entry instead.
"""
import logging
from typing import Optional

from ..exceptions import LocationUnavailableError
from ..models import Coordinates
from .interfaces import ILocationProvider

logger = logging.getLogger(__name__)

UNKNOWN_LOCATION = "Unknown location"


class LocationService:
    def __init__(self, provider: ILocationProvider):
        self.provider = provider

    def resolve(self) -> Optional[Coordinates]:
        """Current coordinates, or None when the provider cannot supply them."""
        try:
            return self.provider.current_coordinates()
        except LocationUnavailableError as e:
            logger.warning(f"Auto location unavailable, manual entry required: {e}")
            return None

    @staticmethod
    def format_address(
        street: Optional[str] = None,
        city: Optional[str] = None,
        region: Optional[str] = None,
    ) -> str:
        """Join reverse-geocoded parts into a single display line."""
        label = " ".join(part.strip() for part in (street, city, region) if part and part.strip())
        return label or UNKNOWN_LOCATION
