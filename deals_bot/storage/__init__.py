"""
Хранилища каталога, аналитики и пользователей
"""
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from shared.config.settings import Settings
from .base import AnalyticsStore, CatalogStore, UserRegistry
from .json_files import JsonAnalyticsStore, JsonCatalogStore, JsonUserRegistry
from .memory import MemoryAnalyticsStore, MemoryCatalogStore, MemoryUserRegistry
from .sql import SqlAnalyticsStore, SqlCatalogStore, SqlUserRegistry


@dataclass
class Stores:
    """Набор хранилищ одного бэкенда"""
    catalog: CatalogStore
    analytics: AnalyticsStore
    users: UserRegistry

    async def initialize(self) -> None:
        """Создаёт файлы по умолчанию (для бэкендов, которым это нужно)"""
        for store in (self.catalog, self.analytics, self.users):
            initialize = getattr(store, "initialize", None)
            if initialize is not None:
                await initialize()


def create_stores(
    settings: Settings,
    session_factory: Optional[async_sessionmaker[AsyncSession]] = None,
) -> Stores:
    """
    Создаёт хранилища выбранного бэкенда

    Args:
        settings: Настройки (storage_backend, data_dir)
        session_factory: Фабрика сессий, обязательна для бэкенда sql
    """
    backend = settings.storage_backend

    if backend == "memory":
        return Stores(MemoryCatalogStore(), MemoryAnalyticsStore(), MemoryUserRegistry())

    if backend == "json":
        return Stores(
            JsonCatalogStore(settings.data_dir),
            JsonAnalyticsStore(settings.data_dir),
            JsonUserRegistry(settings.data_dir),
        )

    if backend == "sql":
        if session_factory is None:
            raise ValueError("SQL storage backend requires a session factory")
        return Stores(
            SqlCatalogStore(session_factory),
            SqlAnalyticsStore(session_factory),
            SqlUserRegistry(session_factory),
        )

    raise ValueError(f"Unknown storage backend: {backend}")


__all__ = [
    "AnalyticsStore",
    "CatalogStore",
    "UserRegistry",
    "Stores",
    "create_stores",
    "JsonAnalyticsStore",
    "JsonCatalogStore",
    "JsonUserRegistry",
    "MemoryAnalyticsStore",
    "MemoryCatalogStore",
    "MemoryUserRegistry",
    "SqlAnalyticsStore",
    "SqlCatalogStore",
    "SqlUserRegistry",
]
