"""
Рассылка уведомлений всем пользователям бота

Получатели обходятся последовательно. Ошибка доставки одному чату
логируется и попадает в отчёт, но не прерывает рассылку остальным.
Повторов и backoff нет: доставка best-effort.
"""
import asyncio
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional, Sequence

from aiogram import Bot
from aiogram.enums import ParseMode
from loguru import logger


class BroadcastStatus(str, Enum):
    """Итог рассылки"""
    ALL_SUCCEEDED = "all_succeeded"
    PARTIAL = "partial"
    ALL_FAILED = "all_failed"
    NO_RECIPIENTS = "no_recipients"


@dataclass
class BroadcastPayload:
    """Содержимое уведомления"""
    text: str
    image: Optional[str] = None
    link: Optional[str] = None


@dataclass
class BroadcastResult:
    """Отчёт о рассылке"""
    success_count: int = 0
    failure_count: int = 0
    errors: Dict[int, str] = field(default_factory=dict)

    @property
    def total(self) -> int:
        return self.success_count + self.failure_count

    @property
    def status(self) -> BroadcastStatus:
        if self.total == 0:
            return BroadcastStatus.NO_RECIPIENTS
        if self.failure_count == 0:
            return BroadcastStatus.ALL_SUCCEEDED
        if self.success_count == 0:
            return BroadcastStatus.ALL_FAILED
        return BroadcastStatus.PARTIAL


def format_link_message(link: str) -> str:
    return f"🔗 Link: {link}"


class NotificationBroadcaster:
    """
    Рассылка через Telegram Bot API.

    Для каждого получателя:
    1. Фото с подписью, если есть image, иначе текст
    2. Отдельное сообщение со ссылкой, если есть link

    Получатель считается успешным, только если доставлены все его сообщения.
    """

    def __init__(self, bot: Bot):
        self.bot = bot

    async def deliver(self, chat_id: int, payload: BroadcastPayload) -> None:
        """Доставка одному получателю; исключения пробрасываются"""
        if payload.image:
            await self.bot.send_photo(chat_id=chat_id, photo=payload.image, caption=payload.text, parse_mode=None)
        else:
            await self.bot.send_message(chat_id=chat_id, text=payload.text, parse_mode=None)

        if payload.link:
            await self.bot.send_message(
                chat_id=chat_id,
                text=format_link_message(payload.link),
                parse_mode=None,
            )

    async def broadcast(self, payload: BroadcastPayload, recipients: Sequence[int]) -> BroadcastResult:
        """
        Отправляет уведомление всем получателям по очереди

        Args:
            payload: Текст, картинка и ссылка
            recipients: chat_id получателей

        Returns:
            BroadcastResult: Счётчики и ошибки по каждому неуспешному чату
        """
        result = BroadcastResult()

        for chat_id in recipients:
            try:
                await self.deliver(chat_id, payload)
                result.success_count += 1
            except Exception as e:
                result.failure_count += 1
                result.errors[chat_id] = str(e) or type(e).__name__
                logger.error(f"Error sending notification to chat {chat_id}: {e}")

        logger.info(
            f"Broadcast finished: {result.status.value} "
            f"({result.success_count} sent, {result.failure_count} failed)"
        )
        return result

    async def send_sequence(
        self,
        chat_id: int,
        messages: Sequence[str],
        delay: float = 0,
        parse_mode: Optional[str] = ParseMode.HTML,
    ) -> int:
        """
        Отправляет серию сообщений по порядку с паузой между ними

        Серия обрывается на первой ошибке.

        Returns:
            int: Сколько сообщений доставлено
        """
        sent = 0
        for index, text in enumerate(messages):
            if index > 0 and delay > 0:
                await asyncio.sleep(delay)
            try:
                await self.bot.send_message(chat_id=chat_id, text=text, parse_mode=parse_mode)
            except Exception as e:
                logger.error(f"Error sending message {index + 1}/{len(messages)} to chat {chat_id}: {e}")
                break
            sent += 1
        return sent
