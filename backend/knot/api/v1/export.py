from fastapi import APIRouter, Cookie, Depends
from fastapi.responses import Response
from sqlalchemy.orm import Session

from knot.config import settings
from knot.database import get_db
from knot.schemas.export import ExportRequest
from knot.services.export_service import collect_export_items, generate_html

router = APIRouter()


@router.post("")
def export_html(
    payload: ExportRequest,
    locale: str | None = Cookie(default=None),
    db: Session = Depends(get_db),
):
    items = collect_export_items(db, payload.api_ids)
    html = generate_html(items, locale or settings.EXPORT_DEFAULT_LOCALE)
    return Response(
        content=html,
        media_type="text/html; charset=utf-8",
        headers={"Content-Disposition": 'attachment; filename="api-docs.html"'},
    )
