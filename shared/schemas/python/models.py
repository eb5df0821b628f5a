from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, EmailStr, Field, model_validator

TradeAction = Literal["buy", "sell", "hold"]
Confidence = Literal["high", "medium", "low"]

TRADE_ACTIONS = ("buy", "sell", "hold")
CONFIDENCE_LEVELS = ("high", "medium", "low")
ADMIN_ROLE = "admin"


class AuthenticatedUser(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str = Field(..., min_length=1)
    email: Optional[str] = None
    role: Optional[str] = None  # auth role ("authenticated"), not the profile role


class UserProfile(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str = Field(..., min_length=1)
    role: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role == ADMIN_ROLE


class Chart(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: Union[int, str]  # bigint identity or uuid
    symbol: str
    image_url: str
    notes: Optional[str] = None
    created_at: datetime
    uploaded_by: str


class ChartCreate(BaseModel):
    symbol: str = Field(..., min_length=1)
    image_url: str = Field(..., min_length=1)
    notes: Optional[str] = None
    uploaded_by: str = Field(..., min_length=1)


class StructuredInsightCreate(BaseModel):
    symbol: str = Field(..., min_length=1)
    action: TradeAction
    price: float = Field(..., gt=0)
    reasoning: str = Field(..., min_length=1)
    confidence: Confidence = "medium"
    metadata: Dict[str, Any] = Field(default_factory=dict)


class HtmlInsightCreate(BaseModel):
    html_content: str = Field(..., min_length=1)
    metadata: Dict[str, Any] = Field(default_factory=dict)


class TradeInsight(BaseModel):
    """A stored insight: structured recommendation or pre-rendered HTML, never both."""

    model_config = ConfigDict(extra="ignore")

    id: Union[int, str]
    symbol: Optional[str] = None
    action: Optional[TradeAction] = None
    price: Optional[float] = None
    reasoning: Optional[str] = None
    confidence: Optional[Confidence] = None
    html_content: Optional[str] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)
    created_at: datetime

    @model_validator(mode="after")
    def _exactly_one_shape(self) -> "TradeInsight":
        structured = any(
            v is not None for v in (self.symbol, self.action, self.price, self.reasoning)
        )
        if bool(self.html_content) == structured:
            raise ValueError("insight must be either structured or html_content")
        return self

    @property
    def is_html(self) -> bool:
        return bool(self.html_content)


class AuthCredentials(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=6)


class ProfileResponse(BaseModel):
    user: AuthenticatedUser
    profile: Optional[UserProfile] = None
    is_admin: bool = False


__all__ = [
    "TradeAction",
    "Confidence",
    "TRADE_ACTIONS",
    "CONFIDENCE_LEVELS",
    "ADMIN_ROLE",
    "AuthenticatedUser",
    "UserProfile",
    "Chart",
    "ChartCreate",
    "StructuredInsightCreate",
    "HtmlInsightCreate",
    "TradeInsight",
    "AuthCredentials",
    "ProfileResponse",
]
