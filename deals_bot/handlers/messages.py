"""
Обработчик текстовых сообщений: поиск товаров
"""
from aiogram import Router, F
from aiogram.fsm.context import FSMContext
from aiogram.fsm.state import State, StatesGroup
from aiogram.types import Message
from loguru import logger

from deals_bot.context import AppContext
from deals_bot.utils.keyboards import get_search_results_keyboard
from deals_bot.utils.messages import NO_PRODUCTS_FOUND, SEARCH_ERROR, SELECT_PRODUCT


router = Router(name="messages")


class SearchStates(StatesGroup):
    """Пользователь получил результаты и может выбрать товар"""
    awaiting_selection = State()


@router.message(F.text, ~F.text.startswith("/"))
async def handle_search(message: Message, state: FSMContext, ctx: AppContext):
    """
    Любой текст, кроме команд, считается поисковым запросом.

    Запрос сохраняется в аналитику, найденные товары показываются кнопками.
    """
    try:
        outcome = await ctx.tracker.handle_query(message.chat.id, message.text)

        if not outcome.found:
            await state.clear()
            await message.answer(NO_PRODUCTS_FOUND)
            return

        await message.answer(
            SELECT_PRODUCT,
            reply_markup=get_search_results_keyboard(outcome.products, outcome.query.id),
        )
        await state.set_state(SearchStates.awaiting_selection)

    except Exception as e:
        logger.error(f"Error searching products: {e}")
        await message.answer(SEARCH_ERROR)
