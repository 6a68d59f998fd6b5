"""
Deals Bot - запуск в режиме polling (локальная разработка)

В продакшене бот получает апдейты через вебхук админ-панели (run_app.py).
"""
import asyncio

from shared.config.settings import settings
from shared.utils.logger import setup_logger
from deals_bot.context import AppContext


# Настраиваем логгер
logger = setup_logger("deals_bot", settings.log_level)


async def main():
    """Главная функция запуска бота"""

    logger.info("🚀 Starting Deals Bot (polling)...")

    ctx = AppContext.build(settings)
    await ctx.startup()
    dp = ctx.create_dispatcher()

    # Вебхук и polling взаимоисключающие
    await ctx.bot.delete_webhook(drop_pending_updates=False)

    try:
        logger.info("🤖 Deals Bot is running!")
        await dp.start_polling(ctx.bot, allowed_updates=dp.resolve_used_update_types())
    finally:
        await ctx.shutdown()


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except (KeyboardInterrupt, SystemExit):
        logger.info("Bot stopped by user")
