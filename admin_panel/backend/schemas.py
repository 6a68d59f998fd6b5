"""
Pydantic schemas for admin API requests/responses.

Product, Deal and AnalyticsSnapshot come from deals_bot.models and are
returned as-is (camelCase).
"""
from typing import Dict, List, Optional
from pydantic import BaseModel, Field

from deals_bot.models import CamelModel


# ── Common ──

class StatusResponse(BaseModel):
    success: bool
    message: str


# ── Messaging ──

class SendMessageRequest(CamelModel):
    chat_id: int
    message: str = Field(min_length=1)


class NotificationRequest(CamelModel):
    text: str = Field(min_length=1)
    image: Optional[str] = None
    link: Optional[str] = None


class NotificationResponse(CamelModel):
    success: bool
    status: str
    message: str
    success_count: int
    failure_count: int
    errors: Dict[str, str] = Field(default_factory=dict)


# ── Analytics ──

class TopProduct(CamelModel):
    product_id: str
    name: Optional[str] = None
    views: int


class TopQuery(CamelModel):
    query: str
    count: int


class AnalyticsSummary(CamelModel):
    traffic: int
    total_queries: int
    successful_queries: int
    conversion_rate: float
    unique_users: int
    total_views: int
    top_products: List[TopProduct]
    top_queries: List[TopQuery]


# ── Users ──

class UserProfile(BaseModel):
    id: int
    first_name: str = ""
    last_name: str = ""
    username: str = ""
    photo_url: Optional[str] = None
