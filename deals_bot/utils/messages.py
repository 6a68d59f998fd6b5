"""
Тексты сообщений бота
"""
from html import escape
from typing import List

from deals_bot.models import Deal, Product

# Подпись к фото в Telegram ограничена 1024 символами
DESCRIPTION_LIMIT = 600

PRODUCT_NOT_FOUND = "Product not found."
NO_PRODUCTS_FOUND = "No products found. Please try a different search term."
SELECT_PRODUCT = "Select a product:"
NO_DEALS_TODAY = "No deals available for today."

SEARCH_ERROR = "An error occurred while searching for products. Please try again later."
DETAILS_ERROR = "An error occurred while fetching product details. Please try again later."
DEALS_ERROR = "An error occurred while fetching today's deals. Please try again later."
START_ERROR = "Sorry, something went wrong. Please send /start again."


def get_onboarding_messages(first_name: str | None) -> List[str]:
    """Приветственная серия для /start (отправляется по порядку с паузой)"""
    name = escape(first_name or "there")
    return [
        f"Welcome, {name}! Please enter a product name to search.",
        "🔥 Type /today to see today's best deals from Amazon, Flipkart, Meesho and Shopsy.",
        "❓ Need help? Type /help.",
    ]


def get_help_message(email: str, website: str) -> str:
    return (
        "<b>Help Center</b>\n"
        "<i>Here are the details you need:</i>\n\n"
        f"<b>📧 Email:</b> {escape(email)}\n"
        f"<b>🌐 Website:</b> <a href=\"{escape(website, quote=True)}\">Visit Us</a>"
    )


def format_price(value: float) -> str:
    return f"₹{value:.2f}"


def format_product_details(product: Product) -> str:
    """Карточка товара после выбора из результатов поиска"""
    lines = [f"<b>🎧 {escape(product.name)}</b>"]
    if product.description:
        lines.append(escape(shorten(product.description)))
    lines += [
        "",
        f"<b>💰 Price:</b> {format_price(product.price)}",
        f"<b>💵 MRP:</b> <s>{format_price(product.mrp)}</s>",
        f"<b>⭐ Rating:</b> {product.rating:g} ⭐",
    ]
    return "\n".join(lines)


def format_deal(deal: Deal, discount: int) -> str:
    """Карточка сделки дня"""
    lines = ["<b>Deal:</b>", f"<b>{escape(deal.name)}</b>"]
    if deal.category:
        lines.append(f"🏷 {escape(deal.category)}")
    lines += [
        f"💰 Price: {format_price(deal.price)}",
        f"💵 MRP: {format_price(deal.mrp)}",
    ]
    if discount > 0:
        lines.append(f"🔥 {discount}% off")
    lines.append(f"⭐ Rating: {deal.rating:g} ⭐")
    return "\n".join(lines)


def shorten(text: str, limit: int = DESCRIPTION_LIMIT) -> str:
    if len(text) <= limit:
        return text
    return text[:limit - 1].rstrip() + "…"
