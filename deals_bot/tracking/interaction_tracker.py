"""
Трекинг взаимодействий: поисковые запросы и выбор товаров

Цикл одного чата:
    Idle --текст--> record_query -> search -> AwaitingSelection
    AwaitingSelection --выбор товара--> record_view -> карточка / "не найден" -> Idle

Выбор по устаревшей кнопке (товар уже удалён) не считается ошибкой:
просмотр засчитывается, пользователь видит "не найден".
"""
from dataclasses import dataclass
from typing import List, Optional

from loguru import logger

from deals_bot.models import Product, QueryRecord
from deals_bot.search import DEFAULT_LIMIT, search
from deals_bot.storage.base import AnalyticsStore, CatalogStore


@dataclass
class SearchOutcome:
    """Результат обработки текстового запроса"""
    query: QueryRecord
    products: List[Product]

    @property
    def found(self) -> bool:
        return bool(self.products)


class InteractionTracker:
    """Связывает поиск по каталогу с аналитикой"""

    def __init__(self, catalog: CatalogStore, analytics: AnalyticsStore, result_limit: int = DEFAULT_LIMIT):
        self.catalog = catalog
        self.analytics = analytics
        self.result_limit = result_limit

    async def handle_query(self, chat_id: int, text: str) -> SearchOutcome:
        """
        Логирует запрос и ищет товары

        Запрос записывается до поиска, поэтому попадает в аналитику
        даже если поиск ничего не нашёл.
        """
        record = await self.analytics.record_query(chat_id, text)
        products = search(text, await self.catalog.list_products(), limit=self.result_limit)
        logger.info(f"Query #{record.id} from {chat_id}: '{text}' -> {len(products)} match(es)")
        return SearchOutcome(query=record, products=products)

    async def handle_selection(
        self,
        chat_id: int,
        product_id: int,
        query_id: Optional[int] = None,
    ) -> Optional[Product]:
        """
        Засчитывает просмотр и возвращает товар

        Args:
            chat_id: Чат, в котором нажата кнопка
            product_id: id выбранного товара
            query_id: id запроса, из результатов которого сделан выбор

        Returns:
            Optional[Product]: None, если товара уже нет в каталоге
        """
        await self.analytics.record_view(product_id, query_id=query_id or None, chat_id=chat_id)

        product = await self.catalog.get_product(product_id)
        if product is None:
            logger.info(f"Product not found for ID: {product_id}")
        return product
