"""
Поиск товаров по ключевым словам

Товар подходит, если хотя бы одно его ключевое слово СОДЕРЖИТ введённый
текст как подстроку (без учёта регистра). Обратное не проверяется:
запрос длиннее всех ключевых слов товара не найдёт ничего
("gaming laptops" не совпадает с ключом "gaming laptop").
"""
from typing import Iterable, List

from deals_bot.models import Product

DEFAULT_LIMIT = 5


def product_matches(product: Product, needle: str) -> bool:
    """needle должен быть уже приведён к нижнему регистру"""
    return any(needle in keyword.lower() for keyword in product.keywords)


def search(text: str, catalog: Iterable[Product], limit: int = DEFAULT_LIMIT) -> List[Product]:
    """
    Фильтрует каталог по тексту запроса

    Порядок: как в каталоге, без ранжирования. Пустой запрос
    ничего не находит (иначе совпал бы любой товар).

    Args:
        text: Текст пользователя
        catalog: Товары в порядке добавления
        limit: Максимум результатов

    Returns:
        List[Product]: Не больше limit товаров
    """
    needle = text.lower()
    if not needle.strip() or limit <= 0:
        return []

    matches = []
    for product in catalog:
        if product_matches(product, needle):
            matches.append(product)
            if len(matches) >= limit:
                break
    return matches
