"""
Telegram webhook: hands incoming updates to the bot dispatcher.
"""
from aiogram.types import Update
from fastapi import Depends, Request
from fastapi.responses import JSONResponse
from loguru import logger

from deals_bot.context import AppContext
from ..dependencies import get_context


async def telegram_webhook(request: Request, ctx: AppContext = Depends(get_context)):
    """
    Обрабатывает апдейт и всегда отвечает 200.

    Ошибки хендлеров логируются: повторная доставка того же апдейта
    от Telegram ничего не исправит.
    """
    if ctx.dispatcher is None:
        return JSONResponse(status_code=503, content={"ok": False, "message": "Dispatcher is not running"})

    try:
        payload = await request.json()
    except ValueError:
        return JSONResponse(status_code=400, content={"ok": False, "message": "Invalid JSON"})

    try:
        update = Update.model_validate(payload, context={"bot": ctx.bot})
        await ctx.dispatcher.feed_update(ctx.bot, update)
    except Exception as e:
        logger.error(f"Error processing update {payload.get('update_id') if isinstance(payload, dict) else '?'}: {e}")

    return {"ok": True}
