import pytest

from rental_availability import proximity
from rental_availability.models import Listing


def test_distance_new_york_to_los_angeles():
    distance = proximity.distance_miles(40.7128, -74.0060, 34.0522, -118.2437)
    assert distance == pytest.approx(2451, rel=0.01)


def test_distance_same_point_is_zero():
    assert proximity.distance_miles(40.0, -74.0, 40.0, -74.0) == 0


def test_is_within_radius():
    assert proximity.is_within_radius(40.7128, -74.0060, 40.7306, -73.9352, 10)
    assert not proximity.is_within_radius(40.7128, -74.0060, 34.0522, -118.2437, 100)


def test_bounding_box_contains_radius():
    min_lat, max_lat, min_lon, max_lon = proximity.bounding_box(40.0, -74.0, 69)
    assert min_lat == pytest.approx(39.0)
    assert max_lat == pytest.approx(41.0)
    assert min_lon < -75.0 and max_lon > -73.0


def test_filter_by_radius_sorts_and_keeps_unknown():
    listings = [
        Listing(id="far", latitude=34.0522, longitude=-118.2437),
        Listing(id="mid", latitude=40.9, longitude=-74.0),
        Listing(id="near", latitude=40.72, longitude=-74.0),
        Listing(id="nowhere"),
    ]
    result = proximity.filter_by_radius(listings, 40.7128, -74.0060, 50)
    assert [n.listing.id for n in result] == ["near", "mid", "nowhere"]
    assert result[-1].distance_miles is None


def test_filter_by_radius_default_radius(monkeypatch):
    monkeypatch.setattr("rental_availability.proximity.config.DEFAULT_RADIUS_MILES", 1)
    listings = [Listing(id="mid", latitude=40.9, longitude=-74.0)]
    assert proximity.filter_by_radius(listings, 40.7128, -74.0060) == []


def test_can_deliver():
    listing = Listing(id="truck", latitude=40.7128, longitude=-74.0060, delivery_radius_miles=20, fulfillment_type="both")
    assert proximity.can_deliver(listing, 40.7306, -73.9352)
    assert not proximity.can_deliver(listing, 34.0522, -118.2437)

    pickup_only = listing.model_copy(update={"fulfillment_type": "pickup"})
    assert not proximity.can_deliver(pickup_only, 40.7306, -73.9352)
