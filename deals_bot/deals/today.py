"""
Сделки дня (/today)
"""
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Sequence

from aiogram import Bot
from loguru import logger

from deals_bot.models import Deal
from deals_bot.utils.keyboards import get_deal_keyboard
from deals_bot.utils.messages import NO_DEALS_TODAY, format_deal


def discount_percent(price: float, mrp: float) -> int:
    """
    Скидка в процентах: round((mrp - price) / mrp * 100)

    Округление half-up, как Math.round на дашборде. Без MRP или при цене
    выше MRP скидки нет.
    """
    if mrp <= 0:
        return 0
    mrp_d = Decimal(str(mrp))
    ratio = (mrp_d - Decimal(str(price))) / mrp_d * 100
    return max(0, int(ratio.quantize(Decimal("1"), rounding=ROUND_HALF_UP)))


@dataclass
class DealsDelivery:
    """Сколько сделок доставлено в чат"""
    sent: int = 0
    failed: int = 0


async def send_todays_deals(bot: Bot, chat_id: int, deals: Sequence[Deal]) -> DealsDelivery:
    """
    Отправляет каждую сделку отдельным сообщением в порядке хранения

    Фото с подписью, если есть картинка, иначе текст. Ошибка на одной
    сделке логируется и не мешает отправке следующих.
    """
    delivery = DealsDelivery()

    if not deals:
        await bot.send_message(chat_id=chat_id, text=NO_DEALS_TODAY)
        return delivery

    for deal in deals:
        text = format_deal(deal, discount_percent(deal.price, deal.mrp))
        keyboard = get_deal_keyboard(deal)
        try:
            if deal.image:
                await bot.send_photo(chat_id=chat_id, photo=deal.image, caption=text, reply_markup=keyboard)
            else:
                await bot.send_message(chat_id=chat_id, text=text, reply_markup=keyboard)
            delivery.sent += 1
        except Exception as e:
            delivery.failed += 1
            logger.error(f"Error sending deal '{deal.name}' to chat {chat_id}: {e}")

    logger.info(f"Today's deals sent to {chat_id}: {delivery.sent} ok, {delivery.failed} failed")
    return delivery
