"""
Контекст приложения

Создаётся один раз при старте процесса и передаётся в хендлеры aiogram
(через workflow data диспетчера) и в роуты FastAPI (через app.state).
"""
from dataclasses import dataclass
from typing import Optional

from aiogram import Bot, Dispatcher
from aiogram.client.default import DefaultBotProperties
from aiogram.enums import ParseMode
from aiogram.fsm.storage.memory import MemoryStorage
from loguru import logger
from sqlalchemy.ext.asyncio import AsyncEngine

from shared.config.settings import Settings
from shared.database.base import create_engine, create_session_factory, init_db
from deals_bot.notifications import NotificationBroadcaster
from deals_bot.storage import Stores, create_stores
from deals_bot.tracking import InteractionTracker


@dataclass
class AppContext:
    settings: Settings
    bot: Bot
    stores: Stores
    tracker: InteractionTracker
    broadcaster: NotificationBroadcaster
    engine: Optional[AsyncEngine] = None
    dispatcher: Optional[Dispatcher] = None

    @classmethod
    def build(
        cls,
        settings: Settings,
        bot: Optional[Bot] = None,
        stores: Optional[Stores] = None,
    ) -> "AppContext":
        """
        Собирает контекст из настроек

        Args:
            settings: Настройки приложения
            bot: Готовый бот (тесты); по умолчанию создаётся из токена
            stores: Готовые хранилища (тесты); по умолчанию по storage_backend
        """
        engine = None
        if stores is None:
            session_factory = None
            if settings.storage_backend == "sql":
                engine = create_engine(settings.database_url)
                session_factory = create_session_factory(engine)
            stores = create_stores(settings, session_factory)

        if bot is None:
            bot = Bot(
                token=settings.telegram_bot_token,
                default=DefaultBotProperties(parse_mode=ParseMode.HTML)
            )

        return cls(
            settings=settings,
            bot=bot,
            stores=stores,
            tracker=InteractionTracker(
                stores.catalog,
                stores.analytics,
                result_limit=settings.search_result_limit,
            ),
            broadcaster=NotificationBroadcaster(bot),
            engine=engine,
        )

    def create_dispatcher(self) -> Dispatcher:
        """
        Создаёт диспетчер и регистрирует роутеры

        Роутеры модульные, поэтому диспетчер на процесс один.
        """
        from deals_bot.handlers import callbacks, commands, messages

        dp = Dispatcher(storage=MemoryStorage(), ctx=self)
        dp.include_router(commands.router)
        dp.include_router(callbacks.router)
        dp.include_router(messages.router)  # Должен быть последним (обрабатывает весь текст)

        self.dispatcher = dp
        logger.info("✅ Handlers registered")
        return dp

    async def startup(self) -> None:
        """Инициализирует базу данных и файлы хранилищ"""
        if self.engine is not None:
            logger.info("Initializing database...")
            await init_db(self.engine)
            logger.info("✅ Database initialized")

        await self.stores.initialize()
        logger.info(f"✅ Storage ready ({self.settings.storage_backend})")

    async def shutdown(self) -> None:
        await self.bot.session.close()
        if self.engine is not None:
            await self.engine.dispose()
        logger.info("👋 Deals Bot stopped")
