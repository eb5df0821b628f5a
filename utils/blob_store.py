"""
Chart image storage on Supabase Storage.

Objects live in the ``CHARTS_BUCKET`` bucket under ``charts/<ms>-<SYMBOL>.<ext>``
and are served from the bucket's public URL.
"""

from __future__ import annotations

import base64
import json
import logging
import re
import time
from typing import Optional

import httpx

import config
from utils.errors import UpstreamFailure
from utils.supabase_client import _require_config, supabase_url

logger = logging.getLogger(__name__)

KEY_PREFIX = "charts"
DEFAULT_EXTENSION = "bin"
DEFAULT_CONTENT_TYPE = "application/octet-stream"

_UNSAFE_KEY_CHARS = re.compile(r"[^A-Za-z0-9._-]")


def file_extension(filename: str) -> str:
    """Lowercased extension of ``filename``, or ``bin`` when it has none."""
    _, dot, ext = filename.rpartition(".")
    ext = _UNSAFE_KEY_CHARS.sub("", ext).lower()
    if not dot or not ext:
        return DEFAULT_EXTENSION
    return ext


def build_chart_key(symbol: str, filename: str, now_ms: Optional[int] = None) -> str:
    if now_ms is None:
        now_ms = time.time_ns() // 1_000_000
    safe_symbol = _UNSAFE_KEY_CHARS.sub("-", symbol)
    return f"{KEY_PREFIX}/{now_ms}-{safe_symbol}.{file_extension(filename)}"


def public_url(key: str) -> str:
    return f"{supabase_url()}/storage/v1/object/public/{config.CHARTS_BUCKET}/{key}"


async def upload_chart_image(
    key: str,
    content: bytes,
    *,
    content_type: Optional[str],
    original_name: str,
    token: str,
) -> str:
    """Store ``content`` under ``key`` and return its public URL."""
    _require_config()
    metadata = json.dumps({"contentType": content_type, "originalName": original_name})
    headers = {
        "apikey": config.SUPABASE_ANON_KEY,
        "Authorization": f"Bearer {token}",
        "Content-Type": content_type or DEFAULT_CONTENT_TYPE,
        "x-upsert": "false",
        "x-metadata": base64.b64encode(metadata.encode("utf-8")).decode("ascii"),
    }
    url = f"{supabase_url()}/storage/v1/object/{config.CHARTS_BUCKET}/{key}"
    try:
        async with httpx.AsyncClient(timeout=config.SUPABASE_TIMEOUT) as client:
            response = await client.post(url, content=content, headers=headers)
    except httpx.RequestError as exc:
        logger.error("Storage upload transport error: key=%s error=%s", key, exc)
        raise UpstreamFailure("Failed to store chart image", details=str(exc)) from exc

    if not response.is_success:
        logger.error(
            "Storage upload failed: key=%s status=%s body=%s",
            key,
            response.status_code,
            response.text,
        )
        raise UpstreamFailure(
            "Failed to store chart image",
            details=response.text,
            upstream_status=response.status_code,
        )

    logger.info("Stored chart image %s (%d bytes)", key, len(content))
    return public_url(key)


__all__ = ["build_chart_key", "file_extension", "public_url", "upload_chart_image"]
