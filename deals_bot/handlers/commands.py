"""
Обработчики команд: /start, /help, /today
"""
from aiogram import Bot, Router
from aiogram.filters import Command, CommandStart
from aiogram.fsm.context import FSMContext
from aiogram.types import Message
from loguru import logger

from deals_bot.context import AppContext
from deals_bot.deals import send_todays_deals
from deals_bot.models import UserRecord
from deals_bot.utils.messages import (
    DEALS_ERROR,
    START_ERROR,
    get_help_message,
    get_onboarding_messages,
)


router = Router(name="commands")


@router.message(CommandStart())
async def cmd_start(message: Message, state: FSMContext, ctx: AppContext):
    """
    Обработчик команды /start.
    Регистрирует пользователя для рассылок и отправляет приветственную серию.
    """
    await state.clear()

    user = message.from_user
    try:
        is_new_user = await ctx.stores.users.register(UserRecord(
            chat_id=message.chat.id,
            first_name=user.first_name if user else None,
            last_name=user.last_name if user else None,
            username=user.username if user else None,
        ))
        if not is_new_user:
            logger.info(f"Existing user returned: {message.chat.id}")

        await ctx.broadcaster.send_sequence(
            message.chat.id,
            get_onboarding_messages(user.first_name if user else None),
            delay=ctx.settings.onboarding_delay,
        )

    except Exception as e:
        logger.error(f"Error in /start command: {e}")
        await message.answer(START_ERROR)


@router.message(Command("help"))
async def cmd_help(message: Message, ctx: AppContext):
    """Контакты поддержки"""
    await message.answer(
        get_help_message(ctx.settings.help_email, ctx.settings.help_website),
        disable_web_page_preview=True,
    )


@router.message(Command("today"))
async def cmd_today(message: Message, bot: Bot, ctx: AppContext):
    """Сделки дня: каждая отдельным сообщением"""
    try:
        deals = await ctx.stores.catalog.list_deals()
        await send_todays_deals(bot, message.chat.id, deals)
    except Exception as e:
        logger.error(f"Error fetching today deals: {e}")
        await message.answer(DEALS_ERROR)
