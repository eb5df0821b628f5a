"""
Chart gallery: the chart list for signed-in users plus the admin upload form.
"""

from __future__ import annotations

import logging
import mimetypes
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Union

from pydantic import ValidationError

from client.http import ApiRequestError
from client.session import AuthSession
from shared.schemas.python import Chart

logger = logging.getLogger(__name__)


@dataclass
class ChartFile:
    filename: str
    content: bytes
    content_type: str = "application/octet-stream"

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "ChartFile":
        path = Path(path)
        content_type, _ = mimetypes.guess_type(path.name)
        return cls(path.name, path.read_bytes(), content_type or "application/octet-stream")


def format_chart_date(created_at: datetime) -> str:
    """``Oct 18, 2026, 3:05 PM``"""
    hour = created_at.hour % 12 or 12
    suffix = "AM" if created_at.hour < 12 else "PM"
    return (
        f"{created_at:%b} {created_at.day}, {created_at.year}, "
        f"{hour}:{created_at.minute:02d} {suffix}"
    )


class ChartGallery:
    def __init__(self, session: AuthSession):
        self.session = session
        self.charts: List[Chart] = []
        self.loading = True
        self.error: Optional[str] = None
        self.upload_loading = False

        self.chart_file: Optional[ChartFile] = None
        self.chart_symbol = ""
        self.chart_notes = ""

    @property
    def is_admin(self) -> bool:
        """Whether to show the upload form. Advisory; the API re-checks."""
        return self.session.is_admin

    async def load(self) -> None:
        """Initial load: admin flag and chart list when signed in."""
        if not self.session.is_signed_in:
            self.loading = False
            return
        await self.session.refresh_profile()
        await self.refresh()

    async def refresh(self) -> None:
        try:
            data = await self.session.api.get("/api/charts")
            self.charts = [Chart.model_validate(row) for row in data.get("charts") or []]
            self.error = None
        except ApiRequestError as exc:
            self.error = exc.message or "Failed to load charts"
            logger.warning("Failed to load charts: %s", exc)
        except ValidationError as exc:
            self.error = "Failed to load charts"
            logger.warning("Malformed chart rows: %s", exc)
        finally:
            self.loading = False

    def select_file(self, chart_file: Union[ChartFile, str, Path, None]) -> None:
        if chart_file is None or isinstance(chart_file, ChartFile):
            self.chart_file = chart_file
        else:
            self.chart_file = ChartFile.from_path(chart_file)

    async def upload(self) -> bool:
        if not self.chart_file:
            self.error = "Please select a chart image"
            return False
        if not self.chart_symbol.strip():
            self.error = "Please enter a symbol"
            return False
        if not self.is_admin:
            self.error = "Only admins can upload charts"
            return False
        if not self.session.access_token:
            self.error = "Not authenticated"
            return False

        self.upload_loading = True
        self.error = None
        try:
            await self.session.api.post(
                "/api/charts",
                data={
                    "symbol": self.chart_symbol.strip().upper(),
                    "notes": self.chart_notes.strip(),
                },
                files={
                    "file": (
                        self.chart_file.filename,
                        self.chart_file.content,
                        self.chart_file.content_type,
                    )
                },
            )
        except ApiRequestError as exc:
            self.error = exc.message or "Failed to upload chart"
            logger.warning("Chart upload failed: %s", exc)
            return False
        finally:
            self.upload_loading = False

        self.chart_file = None
        self.chart_symbol = ""
        self.chart_notes = ""
        await self.refresh()
        return True


__all__ = ["ChartFile", "ChartGallery", "format_chart_date"]
