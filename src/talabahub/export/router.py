"""CSV export endpoint. Rows are supplied by the caller; the backend is not called."""

from datetime import datetime, timezone
from typing import Any

import structlog
from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response
from pydantic import BaseModel

from talabahub.auth.dependencies import require_session
from talabahub.auth.session import SessionContext
from talabahub.export.domains import EXPORT_TABLES, get_export_table

logger = structlog.get_logger()

router = APIRouter(prefix="/api/v1/export", tags=["Export"])


class ExportRequest(BaseModel):
    records: list[dict[str, Any]]


@router.get("")
async def export_entities() -> dict[str, list[str]]:
    """Entities that have an export table."""
    return {"entities": sorted(EXPORT_TABLES)}


@router.post("/{entity}")
async def export_csv(
    entity: str,
    body: ExportRequest,
    session: SessionContext = Depends(require_session),  # noqa: B008
) -> Response:
    """Render ``records`` with the entity's export table as a CSV attachment."""
    try:
        table = get_export_table(entity)
    except KeyError as e:
        raise HTTPException(status_code=404, detail=f"Unknown export entity: {entity}") from e

    content = table.to_csv(body.records)
    filename = table.filename(datetime.now(timezone.utc).date())
    logger.info("csv_exported", entity=entity, rows=len(body.records), user_id=session.user_id)
    return Response(
        content=content,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
