"""Pydantic models for charts, trade insights and user profiles."""

from .models import (
    ADMIN_ROLE,
    CONFIDENCE_LEVELS,
    TRADE_ACTIONS,
    AuthCredentials,
    AuthenticatedUser,
    Chart,
    ChartCreate,
    HtmlInsightCreate,
    ProfileResponse,
    StructuredInsightCreate,
    TradeInsight,
    UserProfile,
)

__all__ = [
    "ADMIN_ROLE",
    "CONFIDENCE_LEVELS",
    "TRADE_ACTIONS",
    "AuthCredentials",
    "AuthenticatedUser",
    "Chart",
    "ChartCreate",
    "HtmlInsightCreate",
    "ProfileResponse",
    "StructuredInsightCreate",
    "TradeInsight",
    "UserProfile",
]
