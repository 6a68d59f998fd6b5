"""
Inline-клавиатуры бота
"""
from typing import Sequence

from aiogram.filters.callback_data import CallbackData
from aiogram.types import InlineKeyboardButton, InlineKeyboardMarkup

from deals_bot.models import Deal, Product


class ProductCallback(CallbackData, prefix="product"):
    """
    Выбор товара из результатов поиска.

    query_id связывает выбор с запросом, который его породил
    (0, если запрос не удалось сохранить).
    """
    product_id: int
    query_id: int = 0


def get_search_results_keyboard(products: Sequence[Product], query_id: int) -> InlineKeyboardMarkup:
    """По кнопке на каждый найденный товар"""
    return InlineKeyboardMarkup(inline_keyboard=[
        [InlineKeyboardButton(
            text=product.name,
            callback_data=ProductCallback(product_id=product.id, query_id=query_id).pack()
        )]
        for product in products
    ])


def get_product_keyboard(product: Product) -> InlineKeyboardMarkup:
    """Кнопки карточки товара: страница товара (если есть) и заказ"""
    rows = []
    if product.product_link:
        rows.append([InlineKeyboardButton(text="View Product", url=product.product_link)])
    rows.append([InlineKeyboardButton(text="Order Now", url=product.buy_link)])
    return InlineKeyboardMarkup(inline_keyboard=rows)


def get_deal_keyboard(deal: Deal) -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(inline_keyboard=[
        [InlineKeyboardButton(text="Order Now", url=deal.buy_link)]
    ])
