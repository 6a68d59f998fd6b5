"""
Запуск бота и админ-API в одном процессе (Render/Railway)

USE_WEBHOOK=true:  апдейты приходят на POST /webhook админ-API
USE_WEBHOOK=false: бот работает через polling рядом с API
"""
import asyncio
import sys

import uvicorn
from loguru import logger

from shared.config.settings import settings
from shared.utils.logger import setup_logger
from deals_bot.context import AppContext
from admin_panel.backend.main import create_app


async def main():
    """Один контекст на бота и API"""
    logger.info("=" * 50)
    logger.info("Deals Bot - Starting...")
    logger.info("=" * 50)

    ctx = AppContext.build(settings)
    await ctx.startup()
    dp = ctx.create_dispatcher()

    server = uvicorn.Server(uvicorn.Config(
        create_app(ctx),
        host=settings.api_host,
        port=settings.api_port,
        log_level=settings.log_level.lower(),
        log_config=None,
    ))

    try:
        if settings.use_webhook and settings.webhook_url:
            await ctx.bot.set_webhook(settings.webhook_url)
            logger.info(f"✅ Webhook set: {settings.webhook_url}")
            await server.serve()
        else:
            await ctx.bot.delete_webhook(drop_pending_updates=False)
            logger.info("🤖 Polling mode")
            polling = asyncio.create_task(
                dp.start_polling(ctx.bot, allowed_updates=dp.resolve_used_update_types(), handle_signals=False)
            )
            try:
                # Сигналы ловит uvicorn; после его остановки гасим polling
                await server.serve()
            finally:
                polling.cancel()
                await asyncio.gather(polling, return_exceptions=True)
    finally:
        await ctx.shutdown()


if __name__ == "__main__":
    setup_logger("deals_bot", settings.log_level)
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Stopped by user")
    except Exception as e:
        logger.error(f"Fatal error: {e}")
        sys.exit(1)
