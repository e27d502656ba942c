"""Tests for tour statistics, the monthly plan and geo search."""

from datetime import datetime

import pytest

from natours.core.errors import BadRequestError
from natours.services import tours as tour_service


def _point(lat: float, lng: float) -> dict:
    return {"type": "Point", "coordinates": [lng, lat]}


def test_tour_stats_groups_by_difficulty(test_db_session, create_tour):
    """Test that stats cover well rated public tours only, cheapest group first."""
    create_tour(difficulty="easy", price=100, ratings_quantity=2)
    create_tour(difficulty="easy", price=300, ratings_average=4.9, ratings_quantity=3)
    create_tour(difficulty="difficult", price=1000)
    create_tour(difficulty="medium", price=50, ratings_average=3.0)
    create_tour(difficulty="medium", price=20, secret_tour=True)

    stats = tour_service.tour_stats(test_db_session)

    assert [row["difficulty"] for row in stats] == ["EASY", "DIFFICULT"]
    easy = stats[0]
    assert easy["num_tours"] == 2
    assert easy["num_ratings"] == 5
    assert easy["avg_rating"] == pytest.approx(4.7)
    assert easy["avg_price"] == pytest.approx(200)
    assert (easy["min_price"], easy["max_price"]) == (100, 300)


def test_tour_stats_empty(test_db_session):
    assert tour_service.tour_stats(test_db_session) == []


def test_monthly_plan(test_db_session, create_tour):
    """Test that starts are counted per month of the year, busiest first."""
    create_tour(
        name="Forest Hiker Tour",
        start_dates=[datetime(2021, 4, 25, 10), datetime(2021, 7, 20, 10), datetime(2022, 4, 1, 10)],
    )
    create_tour(name="Sea Explorer Tour", start_dates=[datetime(2021, 7, 1, 9)])
    create_tour(name="Hidden Secret Tour", start_dates=[datetime(2021, 7, 5, 9)], secret_tour=True)

    plan = tour_service.monthly_plan(test_db_session, 2021)

    assert [(row["month"], row["num_tour_starts"]) for row in plan] == [(7, 2), (4, 1)]
    assert sorted(plan[0]["tours"]) == ["Forest Hiker Tour", "Sea Explorer Tour"]
    assert plan[1]["tours"] == ["Forest Hiker Tour"]


def test_monthly_plan_other_year(test_db_session, create_tour):
    create_tour(start_dates=[datetime(2021, 4, 25, 10)])

    assert tour_service.monthly_plan(test_db_session, 2030) == []


@pytest.mark.parametrize("latlng", ["34.1", "abc,def", "34.1,-118.2,5", ""])
def test_parse_latlng_rejects_bad_values(latlng):
    """Test that anything but two numbers is a 400."""
    with pytest.raises(BadRequestError) as exc_info:
        tour_service.parse_latlng(latlng)

    assert exc_info.value.message == "Please provide latitude and longitude in the format lat,lng."


def test_parse_latlng():
    assert tour_service.parse_latlng("34.111745,-118.113491") == (34.111745, -118.113491)


def test_parse_unit():
    assert tour_service.parse_unit("km") == "km"
    with pytest.raises(BadRequestError):
        tour_service.parse_unit("parsec")


@pytest.fixture
def located_tours(create_tour):
    """One tour near Los Angeles, one in New York, one without a start location."""
    return {
        "la": create_tour(name="Los Angeles Tour", start_location=_point(34.1, -118.2)),
        "ny": create_tour(name="New York City Tour", start_location=_point(40.7, -74.0)),
        "nowhere": create_tour(name="Nowhere In Particular"),
    }


def test_tours_within(test_db_session, located_tours):
    """Test the radius search in both units."""
    names = [tour.name for tour in tour_service.tours_within(test_db_session, 100, 34.05, -118.24, "mi")]
    assert names == ["Los Angeles Tour"]

    names = {tour.name for tour in tour_service.tours_within(test_db_session, 5000, 34.05, -118.24, "km")}
    assert names == {"Los Angeles Tour", "New York City Tour"}


def test_distances(test_db_session, located_tours):
    """Test that distances are sorted ascending and converted to the unit."""
    rows = tour_service.distances(test_db_session, 34.05, -118.24, "mi")

    assert [row["name"] for row in rows] == ["Los Angeles Tour", "New York City Tour"]
    assert rows[0]["distance"] < 10
    assert rows[1]["distance"] == pytest.approx(2450, rel=0.02)

    km_rows = tour_service.distances(test_db_session, 34.05, -118.24, "km")
    assert km_rows[1]["distance"] == pytest.approx(rows[1]["distance"] / 0.621371, rel=0.001)
