"""
FastAPI dependencies: application context from app.state.
"""
from fastapi import Request

from deals_bot.context import AppContext


def get_context(request: Request) -> AppContext:
    """Контекст, созданный при старте приложения"""
    return request.app.state.ctx
