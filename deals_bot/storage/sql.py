"""
Хранилища на SQLAlchemy (Postgres в продакшене, SQLite в тестах)

Каждая мутация выполняется в одной транзакции. Первый просмотр товара
(UPDATE, затем INSERT) может столкнуться с параллельным INSERT того же
товара; такая транзакция повторяется целиком.

Контракт ошибок тот же, что у JSON-файлов: чтение деградирует к пустой
коллекции, ошибки записи логируются.
"""
from datetime import datetime, timezone
from typing import List, Optional, Sequence

from loguru import logger
from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from deals_bot.database.models import (
    BotUserRow,
    DealRow,
    ProductRow,
    ProductViewRow,
    QueryRecordRow,
)
from deals_bot.models import (
    AnalyticsSnapshot,
    Deal,
    Product,
    ProductCreate,
    QueryRecord,
    QueryStatus,
    UserRecord,
)
from deals_bot.storage.base import AnalyticsStore, CatalogStore, UserRegistry

# Повтор транзакции просмотра после конфликта первого INSERT
VIEW_WRITE_ATTEMPTS = 2

PRODUCT_FIELDS = (
    "name", "description", "price", "mrp", "rating",
    "image", "product_link", "buy_link", "keywords",
)


def _product_from_row(row: ProductRow) -> Product:
    return Product(id=row.id, **{field: getattr(row, field) for field in PRODUCT_FIELDS})


def _deal_from_row(row: DealRow) -> Deal:
    return Deal(
        id=row.deal_id,
        category=row.category,
        **{field: getattr(row, field) for field in PRODUCT_FIELDS},
    )


class SqlCatalogStore(CatalogStore):

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def list_products(self) -> List[Product]:
        try:
            async with self.session_factory() as session:
                result = await session.execute(select(ProductRow).order_by(ProductRow.id))
                return [_product_from_row(row) for row in result.scalars().all()]
        except (SQLAlchemyError, OSError) as e:
            logger.error(f"Error reading products: {e}")
            return []

    async def get_product(self, product_id: int) -> Optional[Product]:
        try:
            async with self.session_factory() as session:
                row = await session.get(ProductRow, product_id)
                return _product_from_row(row) if row else None
        except (SQLAlchemyError, OSError) as e:
            logger.error(f"Error reading product {product_id}: {e}")
            return None

    async def append_product(self, data: ProductCreate) -> Product:
        row = ProductRow(**data.model_dump(include=set(PRODUCT_FIELDS)))
        try:
            async with self.session_factory() as session:
                session.add(row)
                await session.commit()
                await session.refresh(row)
            logger.info(f"Product added: {row.id} ({row.name})")
            return _product_from_row(row)
        except (SQLAlchemyError, OSError) as e:
            logger.error(f"Error writing product: {e}")
            # Товар не сохранён; id без базы назначить нельзя
            return Product(id=0, **data.model_dump())

    async def remove_product(self, product_id: int) -> bool:
        try:
            async with self.session_factory() as session:
                result = await session.execute(delete(ProductRow).where(ProductRow.id == product_id))
                await session.commit()
        except (SQLAlchemyError, OSError) as e:
            logger.error(f"Error deleting product {product_id}: {e}")
            return False

        removed = result.rowcount > 0
        if removed:
            logger.info(f"Product removed: {product_id}")
        return removed

    async def list_deals(self) -> List[Deal]:
        try:
            async with self.session_factory() as session:
                result = await session.execute(select(DealRow).order_by(DealRow.position))
                return [_deal_from_row(row) for row in result.scalars().all()]
        except (SQLAlchemyError, OSError) as e:
            logger.error(f"Error reading today deals: {e}")
            return []

    async def replace_deals(self, deals: Sequence[Deal]) -> None:
        try:
            async with self.session_factory() as session:
                async with session.begin():
                    await session.execute(delete(DealRow))
                    session.add_all([
                        DealRow(
                            position=position,
                            deal_id=deal.id,
                            category=deal.category,
                            **deal.model_dump(include=set(PRODUCT_FIELDS)),
                        )
                        for position, deal in enumerate(deals)
                    ])
            logger.info(f"Today's deals replaced: {len(deals)} deal(s)")
        except (SQLAlchemyError, OSError) as e:
            logger.error(f"Error writing today deals: {e}")


class SqlAnalyticsStore(AnalyticsStore):

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def record_query(self, chat_id: int, text: str) -> QueryRecord:
        row = QueryRecordRow(
            chat_id=chat_id,
            query=text,
            timestamp=datetime.now(timezone.utc),
            status=QueryStatus.PENDING.value,
        )
        try:
            async with self.session_factory() as session:
                session.add(row)
                await session.commit()
                await session.refresh(row)
        except (SQLAlchemyError, OSError) as e:
            logger.error(f"Error writing query record: {e}")
            return QueryRecord(id=0, chat_id=chat_id, query=text, timestamp=row.timestamp)

        return QueryRecord(
            id=row.id,
            chat_id=row.chat_id,
            query=row.query,
            timestamp=row.timestamp,
            status=QueryStatus(row.status),
        )

    async def _increment_view(self, session: AsyncSession, product_id: int) -> None:
        """UPDATE счётчика, INSERT при первом просмотре товара"""
        result = await session.execute(
            update(ProductViewRow)
            .where(ProductViewRow.product_id == product_id)
            .values(views=ProductViewRow.views + 1)
        )
        if result.rowcount == 0:
            session.add(ProductViewRow(product_id=product_id, views=1))
            await session.flush()

    async def record_view(
        self,
        product_id: int,
        query_id: Optional[int] = None,
        chat_id: Optional[int] = None,
    ) -> None:
        for attempt in range(1, VIEW_WRITE_ATTEMPTS + 1):
            try:
                async with self.session_factory() as session:
                    async with session.begin():
                        await self._increment_view(session, product_id)

                        if query_id is not None and chat_id is not None:
                            await session.execute(
                                update(QueryRecordRow)
                                .where(QueryRecordRow.id == query_id, QueryRecordRow.chat_id == chat_id)
                                .values(status=QueryStatus.SUCCESS.value)
                            )
                return
            except IntegrityError as e:
                # Параллельный первый просмотр успел вставить строку: повтор попадёт в UPDATE
                if attempt == VIEW_WRITE_ATTEMPTS:
                    logger.error(f"Error writing product view {product_id}: {e}")
                else:
                    logger.debug(f"Concurrent first view of product {product_id}, retrying")
            except (SQLAlchemyError, OSError) as e:
                logger.error(f"Error writing product view {product_id}: {e}")
                return

    async def read(self) -> AnalyticsSnapshot:
        try:
            async with self.session_factory() as session:
                query_rows = (await session.execute(
                    select(QueryRecordRow).order_by(QueryRecordRow.id)
                )).scalars().all()
                view_rows = (await session.execute(select(ProductViewRow))).scalars().all()
                traffic = (await session.execute(select(func.count(QueryRecordRow.id)))).scalar() or 0
        except (SQLAlchemyError, OSError) as e:
            logger.error(f"Error reading analytics: {e}")
            return AnalyticsSnapshot()

        return AnalyticsSnapshot(
            queries=[
                QueryRecord(
                    id=row.id,
                    chat_id=row.chat_id,
                    query=row.query,
                    timestamp=row.timestamp,
                    status=QueryStatus(row.status),
                )
                for row in query_rows
            ],
            # Записи запросов не удаляются, поэтому трафик = их количество
            traffic=traffic,
            product_views={str(row.product_id): row.views for row in view_rows},
        )


class SqlUserRegistry(UserRegistry):

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def list_users(self) -> List[UserRecord]:
        try:
            async with self.session_factory() as session:
                result = await session.execute(select(BotUserRow).order_by(BotUserRow.created_at, BotUserRow.chat_id))
                return [
                    UserRecord(
                        chat_id=row.chat_id,
                        first_name=row.first_name,
                        last_name=row.last_name,
                        username=row.username,
                    )
                    for row in result.scalars().all()
                ]
        except (SQLAlchemyError, OSError) as e:
            logger.error(f"Error reading users: {e}")
            return []

    async def register(self, user: UserRecord) -> bool:
        try:
            async with self.session_factory() as session:
                async with session.begin():
                    row = await session.get(BotUserRow, user.chat_id)
                    if row is None:
                        session.add(BotUserRow(
                            chat_id=user.chat_id,
                            first_name=user.first_name,
                            last_name=user.last_name,
                            username=user.username,
                        ))
                        created = True
                    else:
                        row.first_name = user.first_name or row.first_name
                        row.last_name = user.last_name or row.last_name
                        row.username = user.username or row.username
                        created = False
        except (SQLAlchemyError, OSError) as e:
            logger.error(f"Error writing user {user.chat_id}: {e}")
            return False

        if created:
            logger.info(f"New user registered: {user.chat_id}")
        return created
