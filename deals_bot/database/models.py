"""
Модели базы данных для бота сделок
"""
from datetime import datetime
from typing import List, Optional
from sqlalchemy import String, BigInteger, Text, Integer, Float, JSON, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from shared.database.base import Base, TimestampMixin

# В SQLite автоинкремент работает только для INTEGER PRIMARY KEY
BigIntPK = BigInteger().with_variant(Integer, "sqlite")


class ProductRow(Base, TimestampMixin):
    """Товар каталога"""
    __tablename__ = "products"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(500))
    description: Mapped[str] = mapped_column(Text, default="")
    price: Mapped[float] = mapped_column(Float)
    mrp: Mapped[float] = mapped_column(Float)
    rating: Mapped[float] = mapped_column(Float, default=0)
    image: Mapped[Optional[str]] = mapped_column(Text)
    product_link: Mapped[Optional[str]] = mapped_column(Text)
    buy_link: Mapped[str] = mapped_column(Text)
    keywords: Mapped[List[str]] = mapped_column(JSON, default=list)

    def __repr__(self) -> str:
        return f"<ProductRow(id={self.id}, name={self.name})>"


class DealRow(Base, TimestampMixin):
    """
    Сделка дня.

    Список заменяется целиком, порядок хранится в position.
    """
    __tablename__ = "today_deals"

    row_id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    position: Mapped[int] = mapped_column(Integer, index=True)
    deal_id: Mapped[Optional[int]] = mapped_column(BigInteger)
    category: Mapped[Optional[str]] = mapped_column(String(100))
    name: Mapped[str] = mapped_column(String(500))
    description: Mapped[str] = mapped_column(Text, default="")
    price: Mapped[float] = mapped_column(Float)
    mrp: Mapped[float] = mapped_column(Float)
    rating: Mapped[float] = mapped_column(Float, default=0)
    image: Mapped[Optional[str]] = mapped_column(Text)
    product_link: Mapped[Optional[str]] = mapped_column(Text)
    buy_link: Mapped[str] = mapped_column(Text)
    keywords: Mapped[List[str]] = mapped_column(JSON, default=list)


class QueryRecordRow(Base):
    """Поисковый запрос пользователя (только добавление)"""
    __tablename__ = "query_records"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    chat_id: Mapped[int] = mapped_column(BigInteger, index=True)
    query: Mapped[str] = mapped_column(Text)
    timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=True), index=True)
    status: Mapped[str] = mapped_column(String(20), default="Pending")  # Pending, Success


class ProductViewRow(Base):
    """Счётчик просмотров товара"""
    __tablename__ = "product_views"

    product_id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=False)
    views: Mapped[int] = mapped_column(Integer, default=0)


class BotUserRow(Base, TimestampMixin):
    """Пользователь бота: получатель рассылок"""
    __tablename__ = "bot_users"

    chat_id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=False)
    first_name: Mapped[Optional[str]] = mapped_column(String(255))
    last_name: Mapped[Optional[str]] = mapped_column(String(255))
    username: Mapped[Optional[str]] = mapped_column(String(255))

    def __repr__(self) -> str:
        return f"<BotUserRow(chat_id={self.chat_id}, name={self.first_name})>"
