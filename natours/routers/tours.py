"""Tours router."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from natours.core.dependencies import require_permission
from natours.core.handler_factory import create_one, delete_one, get_all, get_one, list_records, update_one
from natours.core.permissions import Permission
from natours.core.responses import serialize, success, success_list
from natours.database import get_db
from natours.resources import TOURS
from natours.schemas.tour import MonthlyPlan, TourDistance, TourResponse, TourStats
from natours.services import tours as tour_service

router = APIRouter(prefix="/api/v1/tours", tags=["tours"])

TOP_CHEAP_PARAMS = [
    ("limit", "5"),
    ("sort", "-ratingsAverage,price"),
    ("fields", "name,price,ratingsAverage,summary,difficulty"),
]


@router.get("/top-5-cheap")
async def top_five_cheap(request: Request, db: Annotated[Session, Depends(get_db)]) -> JSONResponse:
    """Best rated, cheapest five tours. Other query parameters still filter."""
    params = request.query_params.multi_items() + TOP_CHEAP_PARAMS
    return list_records(TOURS, db, params)


@router.get("/tour-stats")
async def get_tour_stats(db: Annotated[Session, Depends(get_db)]) -> JSONResponse:
    """Statistics of tours rated 4.5 or better, per difficulty."""
    stats = tour_service.tour_stats(db)
    return success("stats", [serialize(TourStats, row) for row in stats])


@router.get(
    "/monthly-plan/{year}",
    dependencies=[Depends(require_permission(Permission.VIEW_MONTHLY_PLAN))],
)
async def get_monthly_plan(year: int, db: Annotated[Session, Depends(get_db)]) -> JSONResponse:
    """Number of tour starts per month of ``year``."""
    plan = tour_service.monthly_plan(db, year)
    return success("plan", [serialize(MonthlyPlan, row) for row in plan])


@router.get("/tours-within/{distance}/center/{latlng}/unit/{unit}")
async def get_tours_within(
    distance: float,
    latlng: str,
    unit: str,
    db: Annotated[Session, Depends(get_db)],
) -> JSONResponse:
    """Tours starting within ``distance`` of ``latlng`` ("lat,lng"), ``unit`` mi or km."""
    lat, lng = tour_service.parse_latlng(latlng)
    tours = tour_service.tours_within(db, distance, lat, lng, tour_service.parse_unit(unit))
    return success_list("tours", [serialize(TourResponse, tour) for tour in tours])


@router.get("/distances/{latlng}/unit/{unit}")
async def get_distances(latlng: str, unit: str, db: Annotated[Session, Depends(get_db)]) -> JSONResponse:
    """Distance from ``latlng`` to every tour's start location, nearest first."""
    lat, lng = tour_service.parse_latlng(latlng)
    rows = tour_service.distances(db, lat, lng, tour_service.parse_unit(unit))
    return success_list("distances", [serialize(TourDistance, row) for row in rows])


_manage_tours = [Depends(require_permission(Permission.MANAGE_TOURS))]

router.add_api_route("", get_all(TOURS), methods=["GET"])
router.add_api_route(
    "",
    create_one(TOURS),
    methods=["POST"],
    status_code=status.HTTP_201_CREATED,
    dependencies=_manage_tours,
)
router.add_api_route("/{id}", get_one(TOURS, expand="reviews"), methods=["GET"])
router.add_api_route("/{id}", update_one(TOURS), methods=["PATCH"], dependencies=_manage_tours)
router.add_api_route(
    "/{id}",
    delete_one(TOURS),
    methods=["DELETE"],
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=_manage_tours,
)
