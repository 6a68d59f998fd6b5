"""
Обработчики callback-кнопок: выбор товара из результатов поиска
"""
from aiogram import Bot, Router
from aiogram.fsm.context import FSMContext
from aiogram.types import CallbackQuery
from loguru import logger

from deals_bot.context import AppContext
from deals_bot.utils.keyboards import ProductCallback, get_product_keyboard
from deals_bot.utils.messages import DETAILS_ERROR, PRODUCT_NOT_FOUND, format_product_details


router = Router(name="callbacks")


@router.callback_query(ProductCallback.filter())
async def callback_product_selected(
    callback: CallbackQuery,
    callback_data: ProductCallback,
    state: FSMContext,
    bot: Bot,
    ctx: AppContext,
):
    """
    Карточка выбранного товара.

    Состояние не проверяется: кнопки старых результатов тоже работают.
    """
    await callback.answer()

    chat_id = callback.message.chat.id if callback.message else callback.from_user.id
    logger.info(f"[CALLBACK] product selected: chat={chat_id}, product={callback_data.product_id}")

    try:
        product = await ctx.tracker.handle_selection(
            chat_id, callback_data.product_id, callback_data.query_id,
        )

        if product is None:
            await bot.send_message(chat_id=chat_id, text=PRODUCT_NOT_FOUND)
            return

        text = format_product_details(product)
        keyboard = get_product_keyboard(product)
        if product.image:
            await bot.send_photo(chat_id=chat_id, photo=product.image, caption=text, reply_markup=keyboard)
        else:
            await bot.send_message(chat_id=chat_id, text=text, reply_markup=keyboard)

    except Exception as e:
        logger.error(f"Error in callback_query handler: {e}")
        await bot.send_message(chat_id=chat_id, text=DETAILS_ERROR)

    finally:
        await state.clear()
