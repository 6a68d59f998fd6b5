"""
Хранилища на JSON-файлах (products.json, analytics.json, today-deals.json, users.json)

Каждая мутация делает полный цикл read-modify-write файла. Внутри процесса циклы
одного файла сериализуются asyncio.Lock, запись атомарная (tmp + os.replace).
Между процессами по-прежнему побеждает последний писатель.
"""
import asyncio
import json
import os
from pathlib import Path
from typing import Any, Callable, List, Optional, Sequence, Type, TypeVar

from loguru import logger
from pydantic import BaseModel, ValidationError

from deals_bot.models import (
    AnalyticsSnapshot,
    Deal,
    Product,
    ProductCreate,
    QueryRecord,
    QueryStatus,
    UserRecord,
)
from deals_bot.storage.base import (
    AnalyticsStore,
    CatalogStore,
    UserRegistry,
    merge_user,
    next_product_id,
)

ModelT = TypeVar("ModelT", bound=BaseModel)

PRODUCTS_FILE = "products.json"
DEALS_FILE = "today-deals.json"
ANALYTICS_FILE = "analytics.json"
USERS_FILE = "users.json"


class JsonDocument:
    """Один JSON-файл с блокировкой на цикл чтения-записи"""

    def __init__(self, path: Path, default_factory: Callable[[], Any]):
        self.path = Path(path)
        self.default_factory = default_factory
        self.lock = asyncio.Lock()

    def _read_sync(self) -> Any:
        with open(self.path, "r", encoding="utf-8") as f:
            return json.load(f)

    def _write_sync(self, data: Any) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
        os.replace(tmp_path, self.path)

    async def initialize(self) -> None:
        """Создаёт файл с содержимым по умолчанию, если его нет"""
        if self.path.exists():
            return
        await self.write(self.default_factory())

    async def read(self) -> Any:
        """Читает документ; при любой ошибке возвращает значение по умолчанию"""
        try:
            return await asyncio.to_thread(self._read_sync)
        except FileNotFoundError:
            logger.debug(f"{self.path.name} not found, using defaults")
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Error reading {self.path.name}: {e}")
        return self.default_factory()

    async def write(self, data: Any) -> bool:
        """
        Записывает документ; ошибки записи только логируются

        Returns:
            bool: True, если документ сохранён
        """
        try:
            await asyncio.to_thread(self._write_sync, data)
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"Error writing {self.path.name}: {e}")
            return False
        return True


def parse_records(raw: Any, model: Type[ModelT], source: str) -> List[ModelT]:
    """
    Разбирает список записей, пропуская битые.

    Одна некорректная запись не должна ломать чтение всей коллекции.
    """
    if not isinstance(raw, list):
        if raw is not None:
            logger.error(f"Malformed {source}: expected a list, got {type(raw).__name__}")
        return []

    records = []
    for index, item in enumerate(raw):
        try:
            records.append(model.model_validate(item))
        except ValidationError as e:
            logger.warning(f"Skipping malformed record #{index} in {source}: {e.error_count()} error(s)")
    return records


def dump_records(records: Sequence[BaseModel]) -> list:
    return [r.model_dump(mode="json", by_alias=True) for r in records]


class JsonCatalogStore(CatalogStore):

    def __init__(self, data_dir: Path):
        self.products = JsonDocument(Path(data_dir) / PRODUCTS_FILE, list)
        self.deals = JsonDocument(Path(data_dir) / DEALS_FILE, list)

    async def initialize(self) -> None:
        await self.products.initialize()
        await self.deals.initialize()

    async def list_products(self) -> List[Product]:
        return parse_records(await self.products.read(), Product, PRODUCTS_FILE)

    async def append_product(self, data: ProductCreate) -> Product:
        async with self.products.lock:
            products = await self.list_products()
            product = Product(
                id=next_product_id(p.id for p in products),
                **data.model_dump(),
            )
            products.append(product)
            await self.products.write(dump_records(products))
        logger.info(f"Product added: {product.id} ({product.name})")
        return product

    async def remove_product(self, product_id: int) -> bool:
        async with self.products.lock:
            products = await self.list_products()
            remaining = [p for p in products if p.id != product_id]
            if len(remaining) == len(products):
                return False
            await self.products.write(dump_records(remaining))
        logger.info(f"Product removed: {product_id}")
        return True

    async def list_deals(self) -> List[Deal]:
        return parse_records(await self.deals.read(), Deal, DEALS_FILE)

    async def replace_deals(self, deals: Sequence[Deal]) -> None:
        async with self.deals.lock:
            await self.deals.write(dump_records(deals))
        logger.info(f"Today's deals replaced: {len(deals)} deal(s)")


def _empty_analytics() -> dict:
    return {"queries": [], "traffic": 0, "productViews": {}}


class JsonAnalyticsStore(AnalyticsStore):

    def __init__(self, data_dir: Path):
        self.document = JsonDocument(Path(data_dir) / ANALYTICS_FILE, _empty_analytics)

    async def initialize(self) -> None:
        await self.document.initialize()

    async def read(self) -> AnalyticsSnapshot:
        raw = await self.document.read()
        if not isinstance(raw, dict):
            logger.error(f"Malformed {ANALYTICS_FILE}: expected an object")
            return AnalyticsSnapshot()

        # Старые записи не имеют id: нумеруем по порядку добавления
        raw_queries = raw.get("queries")
        if isinstance(raw_queries, list):
            raw_queries = [
                {"id": index + 1, **item} if isinstance(item, dict) and "id" not in item else item
                for index, item in enumerate(raw_queries)
            ]
        queries = parse_records(raw_queries, QueryRecord, ANALYTICS_FILE)

        views = {}
        raw_views = raw.get("productViews")
        if isinstance(raw_views, dict):
            for key, value in raw_views.items():
                try:
                    views[str(key)] = int(value)
                except (TypeError, ValueError):
                    logger.warning(f"Skipping malformed view counter for product {key}")

        traffic = raw.get("traffic", len(queries))
        if not isinstance(traffic, int):
            traffic = len(queries)

        return AnalyticsSnapshot(queries=queries, traffic=traffic, product_views=views)

    async def _write(self, snapshot: AnalyticsSnapshot) -> bool:
        return await self.document.write(snapshot.model_dump(mode="json", by_alias=True))

    async def record_query(self, chat_id: int, text: str) -> QueryRecord:
        async with self.document.lock:
            snapshot = await self.read()
            next_id = max((q.id for q in snapshot.queries), default=0) + 1
            record = QueryRecord(id=next_id, chat_id=chat_id, query=text)
            snapshot.queries.append(record)
            snapshot.traffic += 1
            saved = await self._write(snapshot)

        if not saved:
            # Несохранённый id достанется следующему запросу
            return record.model_copy(update={"id": 0})
        return record

    async def record_view(
        self,
        product_id: int,
        query_id: Optional[int] = None,
        chat_id: Optional[int] = None,
    ) -> None:
        async with self.document.lock:
            snapshot = await self.read()
            key = str(product_id)
            snapshot.product_views[key] = snapshot.product_views.get(key, 0) + 1

            if query_id is not None and chat_id is not None:
                for record in snapshot.queries:
                    if record.id == query_id and record.chat_id == chat_id:
                        record.status = QueryStatus.SUCCESS
                        break

            await self._write(snapshot)


class JsonUserRegistry(UserRegistry):

    def __init__(self, data_dir: Path):
        self.document = JsonDocument(Path(data_dir) / USERS_FILE, list)

    async def initialize(self) -> None:
        await self.document.initialize()

    async def list_users(self) -> List[UserRecord]:
        return parse_records(await self.document.read(), UserRecord, USERS_FILE)

    async def register(self, user: UserRecord) -> bool:
        async with self.document.lock:
            users = await self.list_users()
            for index, existing in enumerate(users):
                if existing.chat_id == user.chat_id:
                    users[index] = merge_user(existing, user)
                    await self.document.write(dump_records(users))
                    return False

            users.append(user)
            await self.document.write(dump_records(users))
        logger.info(f"New user registered: {user.chat_id}")
        return True
