"""
Модели базы данных для deals_bot
"""
from .models import (
    ProductRow,
    DealRow,
    QueryRecordRow,
    ProductViewRow,
    BotUserRow,
)

__all__ = [
    "ProductRow",
    "DealRow",
    "QueryRecordRow",
    "ProductViewRow",
    "BotUserRow",
]
