from unittest.mock import MagicMock, patch

import requests

from rental_availability import geocode
from rental_availability.context import AppContext


def make_context():
    session = MagicMock()
    return AppContext(session=session, store=MagicMock())


def mapbox_response(features):
    response = MagicMock()
    response.raise_for_status.return_value = None
    response.json.return_value = {"features": features}
    return response


@patch("rental_availability.geocode.config.MAPBOX_ACCESS_TOKEN", "token")
def test_geocode_address_caches_result():
    context = make_context()
    context.session.get.return_value = mapbox_response([{"center": [-74.006, 40.7128], "place_name": "New York"}])

    first = geocode.geocode_address(context, "New York")
    second = geocode.geocode_address(context, "  new   york ")

    assert first.latitude == 40.7128
    assert first.longitude == -74.006
    assert second == first
    context.session.get.assert_called_once()
    assert "new york" in context.geocode_cache


@patch("rental_availability.geocode.config.MAPBOX_ACCESS_TOKEN", "token")
def test_geocode_address_no_match():
    context = make_context()
    context.session.get.return_value = mapbox_response([])
    assert geocode.geocode_address(context, "Atlantis") is None
    assert context.geocode_cache == {}


@patch("rental_availability.geocode.config.MAPBOX_ACCESS_TOKEN", "token")
def test_geocode_address_network_error():
    context = make_context()
    context.session.get.side_effect = requests.exceptions.RequestException("down")
    assert geocode.geocode_address(context, "New York") is None


@patch("rental_availability.geocode.config.MAPBOX_ACCESS_TOKEN", None)
def test_geocode_address_missing_token():
    context = make_context()
    assert geocode.geocode_address(context, "New York") is None
    context.session.get.assert_not_called()


def test_fresh_contexts_do_not_share_cache():
    first = make_context()
    first.geocode_cache["x"] = "cached"
    assert make_context().geocode_cache == {}


@patch("rental_availability.context.requests.Session")
def test_context_lifecycle(mock_session_cls):
    with AppContext.create() as context:
        assert context.store.session is context.session
        context.geocode_cache["x"] = "cached"
    assert context.geocode_cache == {}
    mock_session_cls.return_value.close.assert_called_once()
