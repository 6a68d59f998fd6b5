"""
Products API: list, search, add, delete.
"""
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, Response

from deals_bot.context import AppContext
from deals_bot.models import Product, ProductCreate
from deals_bot.search import search
from ..dependencies import get_context

router = APIRouter(prefix="/api", tags=["Products"])


@router.get("/products", response_model=List[Product])
async def list_products(ctx: AppContext = Depends(get_context)):
    return await ctx.stores.catalog.list_products()


@router.get("/products/{product_id}", response_model=Product)
async def get_product(product_id: int, ctx: AppContext = Depends(get_context)):
    product = await ctx.stores.catalog.get_product(product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return product


@router.post("/products", response_model=Product, status_code=201)
async def create_product(data: ProductCreate, ctx: AppContext = Depends(get_context)):
    return await ctx.stores.catalog.append_product(data)


@router.delete("/products/{product_id}", status_code=204)
async def delete_product(product_id: int, ctx: AppContext = Depends(get_context)):
    removed = await ctx.stores.catalog.remove_product(product_id)
    if not removed:
        raise HTTPException(status_code=404, detail="Product not found")
    return Response(status_code=204)


@router.get("/search", response_model=List[Product])
async def search_products(
    q: str = Query(..., min_length=1),
    limit: int = Query(5, ge=1, le=50),
    ctx: AppContext = Depends(get_context),
):
    """Тот же поиск, что и в боте, но без записи в аналитику"""
    return search(q, await ctx.stores.catalog.list_products(), limit=limit)
