"""
Хранилища в памяти процесса (тесты и локальный запуск без диска)
"""
from typing import Dict, List, Optional, Sequence

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


class MemoryCatalogStore(CatalogStore):

    def __init__(self, products: Optional[Sequence[Product]] = None, deals: Optional[Sequence[Deal]] = None):
        self._products: List[Product] = [p.model_copy() for p in products or []]
        self._deals: List[Deal] = [d.model_copy() for d in deals or []]

    async def list_products(self) -> List[Product]:
        return [p.model_copy() for p in self._products]

    async def append_product(self, data: ProductCreate) -> Product:
        product = Product(
            id=next_product_id(p.id for p in self._products),
            **data.model_dump(),
        )
        self._products = [*self._products, product]
        return product.model_copy()

    async def remove_product(self, product_id: int) -> bool:
        remaining = [p for p in self._products if p.id != product_id]
        removed = len(remaining) != len(self._products)
        self._products = remaining
        return removed

    async def list_deals(self) -> List[Deal]:
        return [d.model_copy() for d in self._deals]

    async def replace_deals(self, deals: Sequence[Deal]) -> None:
        self._deals = [d.model_copy() for d in deals]


class MemoryAnalyticsStore(AnalyticsStore):

    def __init__(self):
        self._queries: List[QueryRecord] = []
        self._traffic = 0
        self._views: Dict[str, int] = {}

    async def record_query(self, chat_id: int, text: str) -> QueryRecord:
        record = QueryRecord(id=len(self._queries) + 1, chat_id=chat_id, query=text)
        self._queries.append(record)
        self._traffic += 1
        return record.model_copy()

    async def record_view(
        self,
        product_id: int,
        query_id: Optional[int] = None,
        chat_id: Optional[int] = None,
    ) -> None:
        key = str(product_id)
        self._views[key] = self._views.get(key, 0) + 1

        if query_id is None or chat_id is None:
            return
        for index, record in enumerate(self._queries):
            if record.id == query_id and record.chat_id == chat_id:
                self._queries[index] = record.model_copy(update={"status": QueryStatus.SUCCESS})
                break

    async def read(self) -> AnalyticsSnapshot:
        return AnalyticsSnapshot(
            queries=[q.model_copy() for q in self._queries],
            traffic=self._traffic,
            product_views=dict(self._views),
        )


class MemoryUserRegistry(UserRegistry):

    def __init__(self, users: Optional[Sequence[UserRecord]] = None):
        self._users: Dict[int, UserRecord] = {u.chat_id: u.model_copy() for u in users or []}

    async def list_users(self) -> List[UserRecord]:
        return [u.model_copy() for u in self._users.values()]

    async def register(self, user: UserRecord) -> bool:
        existing = self._users.get(user.chat_id)
        if existing is None:
            self._users[user.chat_id] = user.model_copy()
            return True
        self._users[user.chat_id] = merge_user(existing, user)
        return False
