"""Tour aggregations: rating statistics, monthly start plan and geo search."""

import logging
import math
from collections import defaultdict
from datetime import datetime
from typing import Any

from sqlalchemy import func
from sqlalchemy.orm import Session

from natours.core.errors import BadRequestError
from natours.models.tour import Tour
from natours.repositories.tours import TourRepository

logger = logging.getLogger(__name__)

EARTH_RADIUS = {"mi": 3963.2, "km": 6378.1}
METRES_TO_UNIT = {"mi": 0.000621371, "km": 0.001}
EARTH_RADIUS_METRES = 6378.1 * 1000


def tour_stats(db: Session, min_rating: float = 4.5) -> list[dict[str, Any]]:
    """Group well rated public tours by difficulty.

    Returns:
        One row per difficulty ordered by average price
    """
    avg_price = func.avg(Tour.price)
    rows = (
        TourRepository(db)
        .find_public_tours()
        .filter(Tour.ratings_average >= min_rating)
        .with_entities(
            func.upper(Tour.difficulty),
            func.count(Tour.id),
            func.sum(Tour.ratings_quantity),
            func.avg(Tour.ratings_average),
            avg_price,
            func.min(Tour.price),
            func.max(Tour.price),
        )
        .group_by(func.upper(Tour.difficulty))
        .order_by(avg_price.asc())
        .all()
    )
    return [
        {
            "difficulty": difficulty,
            "num_tours": num_tours,
            "num_ratings": int(num_ratings or 0),
            "avg_rating": float(avg_rating),
            "avg_price": float(average_price),
            "min_price": float(min_price),
            "max_price": float(max_price),
        }
        for difficulty, num_tours, num_ratings, avg_rating, average_price, min_price, max_price in rows
    ]


def monthly_plan(db: Session, year: int) -> list[dict[str, Any]]:
    """Count tour starts per month of ``year``, busiest month first (at most 12 rows)."""
    by_month: dict[int, list[str]] = defaultdict(list)
    for name, start_dates in TourRepository(db).find_public_tours().with_entities(Tour.name, Tour.start_dates):
        for raw in start_dates or []:
            start = datetime.fromisoformat(raw)
            if start.year == year:
                by_month[start.month].append(name)

    plan = [
        {"month": month, "num_tour_starts": len(names), "tours": names}
        for month, names in by_month.items()
    ]
    plan.sort(key=lambda row: (-row["num_tour_starts"], row["month"]))
    return plan[:12]


def parse_latlng(latlng: str) -> tuple[float, float]:
    """Parse ``"lat,lng"``.

    Raises:
        BadRequestError: If the value is not two comma separated numbers
    """
    try:
        lat, lng = (float(part) for part in latlng.split(","))
    except ValueError as e:
        raise BadRequestError("Please provide latitude and longitude in the format lat,lng.") from e
    return lat, lng


def parse_unit(unit: str) -> str:
    if unit not in EARTH_RADIUS:
        raise BadRequestError("Please provide unit as 'mi' or 'km'.")
    return unit


def _central_angle(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Haversine central angle in radians between two points given in degrees."""
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = phi2 - phi1
    d_lambda = math.radians(lng2 - lng1)
    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    return 2 * math.asin(min(1.0, math.sqrt(a)))


def _located_tours(db: Session) -> list[tuple[Tour, float, float]]:
    located = []
    for tour in TourRepository(db).find_public_tours().filter(Tour.start_location.isnot(None)):
        coordinates = (tour.start_location or {}).get("coordinates")
        if not coordinates:
            continue
        lng, lat = coordinates
        located.append((tour, lat, lng))
    return located


def tours_within(db: Session, distance: float, lat: float, lng: float, unit: str) -> list[Tour]:
    """Tours whose start location lies within ``distance`` (in ``unit``) of a point."""
    radius = distance / EARTH_RADIUS[unit]
    return [
        tour
        for tour, tour_lat, tour_lng in _located_tours(db)
        if _central_angle(lat, lng, tour_lat, tour_lng) <= radius
    ]


def distances(db: Session, lat: float, lng: float, unit: str) -> list[dict[str, Any]]:
    """Distance from a point to every located tour, nearest first."""
    multiplier = METRES_TO_UNIT[unit]
    rows = [
        {
            "id": tour.id,
            "name": tour.name,
            "distance": _central_angle(lat, lng, tour_lat, tour_lng) * EARTH_RADIUS_METRES * multiplier,
        }
        for tour, tour_lat, tour_lng in _located_tours(db)
    ]
    rows.sort(key=lambda row: row["distance"])
    logger.debug(f"Computed {len(rows)} tour distances from ({lat}, {lng}) in {unit}")
    return rows
