"""
Chart endpoints.

POST uploads a chart image (admins only): the image goes to blob storage first,
then a ``charts`` row pointing at its public URL is inserted with the caller's
token. There is no rollback; a failed insert leaves the image orphaned.
"""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, File, Form, Query, Request, UploadFile

from shared.schemas.python import AuthenticatedUser, ChartCreate
from utils import blob_store, supabase_client
from utils.admin_guard import require_admin
from utils.errors import BadRequest, UpstreamFailure
from utils.supabase_auth import get_current_user
from utils.validators import normalize_symbol, parse_limit, require_text

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/charts", tags=["charts"])


@router.post("")
async def upload_chart(
    request: Request,
    user: AuthenticatedUser = Depends(require_admin),
    file: Optional[UploadFile] = File(None),
    symbol: Optional[str] = Form(None),
    notes: Optional[str] = Form(None),
) -> Dict[str, Any]:
    content = await file.read() if file is not None else b""
    if file is None or not file.filename or not content or not require_text(symbol):
        raise BadRequest("Missing required fields")

    normalized = normalize_symbol(symbol)
    token = request.state.access_token
    key = blob_store.build_chart_key(normalized, file.filename)

    image_url = await blob_store.upload_chart_image(
        key,
        content,
        content_type=file.content_type,
        original_name=file.filename,
        token=token,
    )

    record = ChartCreate(
        symbol=normalized,
        image_url=image_url,
        notes=notes if require_text(notes) else None,
        uploaded_by=user.id,
    )
    try:
        chart = await supabase_client.insert_chart(record.model_dump(), token)
    except UpstreamFailure:
        logger.warning("Chart insert failed; stored image %s is orphaned", key)
        raise

    logger.info("Chart uploaded: symbol=%s key=%s user_id=%s", normalized, key, user.id)
    return {"success": True, "chart": chart}


@router.get("")
async def list_charts(
    request: Request,
    user: AuthenticatedUser = Depends(get_current_user),
    limit: Optional[str] = Query(None),
) -> Dict[str, Any]:
    """Charts visible to the caller, newest first."""
    charts = await supabase_client.list_charts(
        request.state.access_token, parse_limit(limit)
    )
    return {"charts": charts}


__all__ = ["router"]
