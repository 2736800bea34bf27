"""エリア名関連のエンドポイント"""
from typing import Any

from fastapi import APIRouter, Depends

from ...features.auth.domain.models import TokenClaims
from ...features.distance.domain.models import Coordinate
from ...infrastructure.container import AppContainer
from ..dependencies import get_container, get_current_user

router = APIRouter()


@router.get("/test-geocoding/{lat}/{lng}")
def test_geocoding(
    lat: float,
    lng: float,
    claims: TokenClaims = Depends(get_current_user),
    container: AppContainer = Depends(get_container),
) -> dict[str, Any]:
    """逆ジオコーディングの動作確認"""
    area = container.area_service.resolve_area(Coordinate(lat, lng))
    return {"coordinates": {"lat": lat, "lng": lng}, "area": area}


@router.post("/update-trip-areas")
def update_trip_areas(
    claims: TokenClaims = Depends(get_current_user),
    container: AppContainer = Depends(get_container),
) -> dict[str, Any]:
    """エリア名が未解決の自分のトリップを再度逆ジオコーディング"""
    result = container.trip_service.backfill_areas(claims.user_id)
    return {
        "message": f"Successfully updated {result['updated']} trips with area names",
        **result,
    }
