import logging
from typing import Optional
from urllib.parse import quote

import requests

from rental_availability import config
from rental_availability.context import AppContext
from rental_availability.models import Coordinates

logger = logging.getLogger(__name__)


def _cache_key(address: str) -> str:
    return " ".join(address.lower().split())


def geocode_address(context: AppContext, address: str) -> Optional[Coordinates]:
    """Resolves a free-text address through Mapbox, memoized in the context's cache."""
    key = _cache_key(address)
    if not key:
        return None
    if key in context.geocode_cache:
        logger.debug(f"Geocode cache hit for '{key}'")
        return context.geocode_cache[key]

    token = config.MAPBOX_ACCESS_TOKEN
    if not token:
        logger.warning("Mapbox configuration missing. Skipping geocoding.")
        return None

    url = f"{config.MAPBOX_BASE_URL}/geocoding/v5/mapbox.places/{quote(address, safe='')}.json"
    try:
        response = context.session.get(
            url,
            params={"access_token": token, "types": "address,poi,place", "limit": 1},
            timeout=config.REQUEST_TIMEOUT,
        )
        response.raise_for_status()
        features = response.json().get("features") or []
    except (requests.exceptions.RequestException, ValueError) as e:
        logger.error(f"Failed to geocode '{address}': {e}")
        return None

    center = features[0].get("center") if features else None
    if not center or len(center) != 2:
        logger.info(f"No geocoding match for '{address}'")
        return None

    feature = features[0]
    lon, lat = center
    coordinates = Coordinates(latitude=lat, longitude=lon, formatted_address=feature.get("place_name"))
    context.geocode_cache[key] = coordinates
    return coordinates
