"""
Интерфейсы хранилищ: каталог, аналитика, пользователи

Контракт общий для всех бэкендов:
- каждая мутация читает и перезаписывает коллекцию целиком;
- ошибки чтения логируются, чтение возвращает пустую коллекцию;
- ошибки записи логируются и проглатываются (данные могут потеряться).
"""
import time
from abc import ABC, abstractmethod
from typing import Iterable, List, Optional, Sequence

from deals_bot.models import (
    AnalyticsSnapshot,
    Deal,
    Product,
    ProductCreate,
    QueryRecord,
    UserRecord,
)


def next_product_id(existing_ids: Iterable[int]) -> int:
    """
    Новый id товара на основе времени в миллисекундах.

    Если товар с таким id уже есть (два добавления в одну миллисекунду),
    берём следующий за максимальным.
    """
    candidate = int(time.time() * 1000)
    ids = list(existing_ids)
    if ids and candidate <= max(ids):
        candidate = max(ids) + 1
    return candidate


class CatalogStore(ABC):
    """Каталог товаров и список сделок дня"""

    @abstractmethod
    async def list_products(self) -> List[Product]:
        ...

    @abstractmethod
    async def append_product(self, data: ProductCreate) -> Product:
        """Добавляет товар и возвращает его с назначенным id"""
        ...

    @abstractmethod
    async def remove_product(self, product_id: int) -> bool:
        """Удаляет товар; False, если такого id нет"""
        ...

    @abstractmethod
    async def list_deals(self) -> List[Deal]:
        ...

    @abstractmethod
    async def replace_deals(self, deals: Sequence[Deal]) -> None:
        """Полностью заменяет список сделок дня"""
        ...

    async def get_product(self, product_id: int) -> Optional[Product]:
        for product in await self.list_products():
            if product.id == product_id:
                return product
        return None


class AnalyticsStore(ABC):
    """История запросов, счётчик трафика и просмотры товаров"""

    @abstractmethod
    async def record_query(self, chat_id: int, text: str) -> QueryRecord:
        """Добавляет запрос в статусе Pending и увеличивает трафик на 1"""
        ...

    @abstractmethod
    async def record_view(
        self,
        product_id: int,
        query_id: Optional[int] = None,
        chat_id: Optional[int] = None,
    ) -> None:
        """
        Увеличивает счётчик просмотров товара.

        Запрос query_id переводится в статус Success, только если он
        принадлежит чату chat_id.
        """
        ...

    @abstractmethod
    async def read(self) -> AnalyticsSnapshot:
        ...


class UserRegistry(ABC):
    """Известные боту чаты: получатели рассылок"""

    @abstractmethod
    async def list_users(self) -> List[UserRecord]:
        ...

    @abstractmethod
    async def register(self, user: UserRecord) -> bool:
        """
        Регистрирует пользователя.

        Returns:
            bool: True если пользователь новый; для существующего
            обновляются только непустые поля имени
        """
        ...

    async def list_chat_ids(self) -> List[int]:
        return [user.chat_id for user in await self.list_users()]

    async def get_user(self, chat_id: int) -> Optional[UserRecord]:
        for user in await self.list_users():
            if user.chat_id == chat_id:
                return user
        return None


def merge_user(existing: UserRecord, incoming: UserRecord) -> UserRecord:
    """Обновляет отображаемые поля, не затирая известные значения пустыми"""
    return existing.model_copy(update={
        "first_name": incoming.first_name or existing.first_name,
        "last_name": incoming.last_name or existing.last_name,
        "username": incoming.username or existing.username,
    })
