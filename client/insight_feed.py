"""
Polling trade insight feed.

``InsightFeed.start()`` fetches immediately and then every
INSIGHT_POLL_INTERVAL seconds; ``close()`` cancels the poll. A failed poll
sets ``state.error`` until the next successful one.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Callable, List, Optional

from pydantic import ValidationError

import config
from client.http import ApiRequestError
from client.session import AuthSession
from shared.schemas.python import TradeInsight
from utils.background_tasks import BackgroundTask

logger = logging.getLogger(__name__)

FEED_LIMIT = 10
LOAD_ERROR = "Failed to load trade insights"


@dataclass(frozen=True)
class FeedState:
    insights: List[TradeInsight] = field(default_factory=list)
    loading: bool = True
    error: Optional[str] = None


def _clock(dt: datetime) -> str:
    hour = dt.hour % 12 or 12
    suffix = "AM" if dt.hour < 12 else "PM"
    return f"{hour}:{dt.minute:02d} {suffix}"


def format_insight_time(created_at: datetime, now: Optional[datetime] = None) -> str:
    """Time only within the last 24 hours, otherwise ``Oct 18, 3:05 PM``."""
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=timezone.utc)
    now = now or datetime.now(timezone.utc)
    if (now - created_at).total_seconds() < 24 * 3600:
        return _clock(created_at)
    return f"{created_at:%b} {created_at.day}, {_clock(created_at)}"


def format_price(price: Optional[float]) -> str:
    return f"${price:.2f}" if price is not None else ""


class InsightFeed:
    def __init__(
        self,
        session: AuthSession,
        *,
        interval: Optional[float] = None,
        limit: int = FEED_LIMIT,
        on_change: Optional[Callable[[FeedState], None]] = None,
    ):
        self.session = session
        self.limit = limit
        self.on_change = on_change
        self.state = FeedState()
        self._poller = BackgroundTask(
            "InsightFeed",
            config.INSIGHT_POLL_INTERVAL if interval is None else interval,
            self.fetch_once,
        )

    def _set_state(self, **changes) -> None:
        self.state = replace(self.state, **changes)
        if self.on_change:
            self.on_change(self.state)

    async def fetch_once(self) -> None:
        try:
            data = await self.session.api.get(
                "/api/trade-insights", params={"limit": self.limit}
            )
            rows = data.get("insights")
            if rows is not None:
                insights = [TradeInsight.model_validate(row) for row in rows]
                self._set_state(insights=insights, error=None, loading=False)
                return
        except (ApiRequestError, ValidationError) as exc:
            logger.warning("Insight poll failed: %s", exc)
            self._set_state(error=LOAD_ERROR, loading=False)
            return
        self._set_state(loading=False)

    async def start(self) -> None:
        await self._poller.start()

    async def close(self) -> None:
        await self._poller.stop()

    @property
    def is_polling(self) -> bool:
        return self._poller.is_running()


__all__ = [
    "FeedState",
    "InsightFeed",
    "format_insight_time",
    "format_price",
]
