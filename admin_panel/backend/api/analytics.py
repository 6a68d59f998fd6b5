"""
Analytics API: raw snapshot and dashboard summary.
"""
from fastapi import APIRouter, Depends, Query

from deals_bot.context import AppContext
from deals_bot.models import AnalyticsSnapshot
from ..dependencies import get_context
from ..schemas import AnalyticsSummary
from ..services.analytics_service import build_summary

router = APIRouter(prefix="/api/analytics", tags=["Analytics"])


@router.get("", response_model=AnalyticsSnapshot)
async def get_analytics(ctx: AppContext = Depends(get_context)):
    return await ctx.stores.analytics.read()


@router.get("/summary", response_model=AnalyticsSummary)
async def get_summary(
    top: int = Query(5, ge=1, le=50),
    ctx: AppContext = Depends(get_context),
):
    snapshot = await ctx.stores.analytics.read()
    products = await ctx.stores.catalog.list_products()
    return build_summary(snapshot, products, top=top)
