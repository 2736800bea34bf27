"""車両ログエクスポートのエンドポイント"""
from fastapi import APIRouter, Depends, Response

from ...features.auth.domain.models import TokenClaims
from ...infrastructure.container import AppContainer
from ..dependencies import get_container, get_current_user
from ..schemas import ExportRequest

router = APIRouter(prefix="/api")


@router.post("/trips/export")
def export_trips(
    body: ExportRequest,
    claims: TokenClaims = Depends(get_current_user),
    container: AppContainer = Depends(get_container),
) -> Response:
    """期間内のトリップをCSVファイルとしてダウンロード"""
    filename, content = container.export_service.export_range(
        claims.user_id, body.start_date, body.end_date
    )
    return Response(
        content=content,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
