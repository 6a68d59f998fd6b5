"""
Today's deals API: read and replace the whole list.
"""
from typing import List

from fastapi import APIRouter, Depends

from deals_bot.context import AppContext
from deals_bot.models import Deal
from ..dependencies import get_context
from ..schemas import StatusResponse

router = APIRouter(prefix="/api/today-deals", tags=["Deals"])


@router.get("", response_model=List[Deal])
async def list_deals(ctx: AppContext = Depends(get_context)):
    return await ctx.stores.catalog.list_deals()


@router.post("", response_model=StatusResponse, status_code=201)
async def replace_deals(deals: List[Deal], ctx: AppContext = Depends(get_context)):
    await ctx.stores.catalog.replace_deals(deals)
    return StatusResponse(success=True, message="Today deals updated successfully!")
