"""
Модели данных каталога, аналитики и пользователей

Все модели сериализуются с camelCase-алиасами (productLink, buyLink, chatId...),
чтобы JSON-файлы и ответы API сохраняли привычные дашборду имена полей.
"""
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Базовая модель с camelCase-алиасами"""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class ProductBase(CamelModel):
    """Общие поля товара и сделки"""
    name: str = Field(min_length=1)
    description: str = ""
    price: float = Field(ge=0)
    mrp: float = Field(ge=0)
    rating: float = 0
    image: Optional[str] = None
    product_link: Optional[str] = None
    buy_link: str = Field(min_length=1)
    keywords: List[str] = Field(default_factory=list)

    @field_validator("keywords", mode="before")
    @classmethod
    def split_keywords(cls, value):
        """Форма добавления товара присылает ключевые слова строкой через запятую"""
        if isinstance(value, str):
            value = value.split(",")
        if isinstance(value, list):
            return [str(k).strip() for k in value if str(k).strip()]
        return value

    @field_validator("image", "product_link", mode="before")
    @classmethod
    def empty_url_to_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value


class ProductCreate(ProductBase):
    """Данные нового товара (id назначает хранилище)"""
    pass


class Product(ProductBase):
    """Товар каталога"""
    id: int


class Deal(ProductBase):
    """Сделка дня: товар с категорией; id задаёт админ"""
    id: Optional[int] = None
    category: Optional[str] = None


class QueryStatus(str, Enum):
    """Статус поискового запроса"""
    PENDING = "Pending"
    SUCCESS = "Success"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class QueryRecord(CamelModel):
    """Запись о поисковом запросе пользователя"""
    id: int
    chat_id: int
    query: str
    timestamp: datetime = Field(default_factory=utcnow)
    status: QueryStatus = QueryStatus.PENDING


class AnalyticsSnapshot(CamelModel):
    """Снимок аналитики: история запросов, трафик и просмотры товаров"""
    queries: List[QueryRecord] = Field(default_factory=list)
    traffic: int = 0
    # Ключ: id товара строкой, как в analytics.json
    product_views: Dict[str, int] = Field(default_factory=dict)

    def views_for(self, product_id: int) -> int:
        return self.product_views.get(str(product_id), 0)


class UserRecord(CamelModel):
    """Пользователь бота (получатель рассылок)"""
    chat_id: int
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    username: Optional[str] = None
