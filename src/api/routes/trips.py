"""オドメーター・トリップのエンドポイント"""
from typing import Any

from fastapi import APIRouter, Depends

from ...features.auth.domain.models import TokenClaims
from ...infrastructure.container import AppContainer
from ..dependencies import get_container, get_current_user
from ..schemas import (
    EndTripRequest,
    OdometerRequest,
    RoutePointRequest,
    StartTripRequest,
    SyncRequest,
)

router = APIRouter(prefix="/api")


@router.get("/odometer")
def get_odometer(
    claims: TokenClaims = Depends(get_current_user),
    container: AppContainer = Depends(get_container),
) -> dict[str, float]:
    return {"currentOdometer": container.trip_service.get_odometer(claims.user_id)}


@router.post("/odometer")
def update_odometer(
    body: OdometerRequest,
    claims: TokenClaims = Depends(get_current_user),
    container: AppContainer = Depends(get_container),
) -> dict[str, Any]:
    odometer = container.trip_service.set_odometer(claims.user_id, body.odometer)
    return {"success": True, "currentOdometer": odometer}


@router.post("/trip/start")
def start_trip(
    body: StartTripRequest,
    claims: TokenClaims = Depends(get_current_user),
    container: AppContainer = Depends(get_container),
) -> dict[str, Any]:
    trip = container.trip_service.start_trip(
        claims.user_id, body.purpose, body.date, body.latitude, body.longitude
    )
    return {"success": True, "trip": trip.to_api_dict()}


@router.post("/trip/end")
def end_trip(
    body: EndTripRequest,
    claims: TokenClaims = Depends(get_current_user),
    container: AppContainer = Depends(get_container),
) -> dict[str, Any]:
    result = container.trip_service.end_trip(
        claims.user_id,
        body.latitude,
        body.longitude,
        gps_distance=body.gps_distance,
        user_end_odometer=body.user_provided_end_odometer,
    )
    return {"success": True, "trip": result.trip.to_api_dict(), "message": result.message}


@router.post("/trip/route")
def record_route_point(
    body: RoutePointRequest,
    claims: TokenClaims = Depends(get_current_user),
    container: AppContainer = Depends(get_container),
) -> dict[str, bool]:
    container.trip_service.record_route_point(
        claims.user_id, body.latitude, body.longitude, body.accuracy
    )
    return {"success": True}


@router.post("/trip/sync")
def sync_route_points(
    body: SyncRequest,
    claims: TokenClaims = Depends(get_current_user),
    container: AppContainer = Depends(get_container),
) -> dict[str, Any]:
    """Service Workerのバックグラウンド同期"""
    accepted = container.trip_service.sync_route_points(
        claims.user_id, body.to_route_points()
    )
    return {"success": True, "applied": accepted > 0, "accepted": accepted}


@router.get("/trip/active")
def get_active_trip(
    claims: TokenClaims = Depends(get_current_user),
    container: AppContainer = Depends(get_container),
) -> dict[str, Any]:
    trip = container.trip_service.get_active_trip(claims.user_id)
    return {"activeTrip": trip.to_api_dict() if trip else None}


@router.get("/trips")
def list_trips(
    claims: TokenClaims = Depends(get_current_user),
    container: AppContainer = Depends(get_container),
) -> dict[str, Any]:
    trips = container.trip_service.list_trips(claims.user_id)
    return {"trips": [trip.to_api_dict() for trip in trips]}


@router.delete("/trip/{trip_id}")
def delete_trip(
    trip_id: str,
    claims: TokenClaims = Depends(get_current_user),
    container: AppContainer = Depends(get_container),
) -> dict[str, Any]:
    container.trip_service.delete_trip(claims.user_id, trip_id)
    return {"success": True, "message": "Trip deleted successfully"}
