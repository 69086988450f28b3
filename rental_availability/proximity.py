import math
from typing import Iterable, List, Optional, Tuple

from rental_availability import config
from rental_availability.models import Listing, NearbyListing

MILES_PER_DEGREE_LAT = 69


def distance_miles(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance between two points, in miles (haversine)."""
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lon / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return config.EARTH_RADIUS_MILES * c


def is_within_radius(lat1: float, lon1: float, lat2: float, lon2: float, radius_miles: float) -> bool:
    return distance_miles(lat1, lon1, lat2, lon2) <= radius_miles


def bounding_box(latitude: float, longitude: float, radius_miles: float) -> Tuple[float, float, float, float]:
    """Coarse (min_lat, max_lat, min_lon, max_lon) box around a point, used to pre-filter queries."""
    lat_delta = radius_miles / MILES_PER_DEGREE_LAT
    lon_delta = radius_miles / (MILES_PER_DEGREE_LAT * math.cos(math.radians(latitude)))
    return latitude - lat_delta, latitude + lat_delta, longitude - lon_delta, longitude + lon_delta


def can_deliver(listing: Listing, latitude: float, longitude: float) -> bool:
    if listing.fulfillment_type not in ("delivery", "both"):
        return False
    if listing.latitude is None or listing.longitude is None or not listing.delivery_radius_miles:
        return False
    return is_within_radius(listing.latitude, listing.longitude, latitude, longitude, listing.delivery_radius_miles)


def filter_by_radius(
    listings: Iterable[Listing],
    latitude: float,
    longitude: float,
    radius_miles: Optional[float] = None,
) -> List[NearbyListing]:
    """Keeps listings within the radius, nearest first.

    Listings without coordinates cannot be ruled out and are kept, after all
    listings with a known distance.
    """
    radius = config.DEFAULT_RADIUS_MILES if radius_miles is None else radius_miles

    nearby = []
    for listing in listings:
        distance = None
        if listing.latitude is not None and listing.longitude is not None:
            distance = distance_miles(latitude, longitude, listing.latitude, listing.longitude)
            if distance > radius:
                continue
        nearby.append(
            NearbyListing(
                listing=listing,
                distance_miles=distance,
                can_deliver=can_deliver(listing, latitude, longitude),
            )
        )

    nearby.sort(key=lambda n: (n.distance_miles is None, n.distance_miles or 0.0))
    return nearby
