from unittest.mock import MagicMock, patch

import pytest

from rental_availability import cli


@patch("rental_availability.cli.run.run_availability")
@patch("rental_availability.cli.AppContext.create")
def test_main_availability(mock_create, mock_run):
    context = MagicMock()
    mock_create.return_value.__enter__.return_value = context

    with patch("sys.argv", ["rental-availability", "availability", "--listing-id", "abc", "--start-date", "2025-01-01", "--days", "5"]):
        cli.main()

    mock_run.assert_called_once_with(context, "abc", start_date="2025-01-01", days=5)


@patch("rental_availability.cli.run.run_search")
@patch("rental_availability.cli.AppContext.create")
def test_main_search(mock_create, mock_search):
    context = MagicMock()
    mock_create.return_value.__enter__.return_value = context

    with patch("sys.argv", ["rental-availability", "-v", "search", "--near", "40.7,-74.0", "--radius", "10"]):
        cli.main()

    mock_search.assert_called_once_with(context, near="40.7,-74.0", address=None, radius=10.0)


@patch("rental_availability.cli.run.run_selection")
@patch("rental_availability.cli.AppContext.create")
def test_main_selection_needs_no_context(mock_create, mock_selection):
    with patch("sys.argv", ["rental-availability", "selection", "--hourly-data", "2024-01-05:08:00"]):
        cli.main()

    mock_selection.assert_called_once_with(hourly_data="2024-01-05:08:00", start_date=None, time_slots=None)
    mock_create.assert_not_called()


def test_parse_arguments_requires_command():
    with pytest.raises(SystemExit):
        cli.parse_arguments([])


def test_search_origin_is_exclusive():
    with pytest.raises(SystemExit):
        cli.parse_arguments(["search", "--near", "1,2", "--address", "Austin"])
