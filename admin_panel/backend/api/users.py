"""
Users API: registered chats and Telegram profile lookup.
"""
from typing import List

from aiogram.exceptions import TelegramBadRequest
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from loguru import logger

from deals_bot.context import AppContext
from deals_bot.models import UserRecord
from ..dependencies import get_context
from ..schemas import UserProfile

router = APIRouter(prefix="/api", tags=["Users"])


@router.get("/users", response_model=List[UserRecord])
async def list_users(ctx: AppContext = Depends(get_context)):
    return await ctx.stores.users.list_users()


@router.get("/user-profile/{chat_id}", response_model=UserProfile)
async def get_user_profile(chat_id: int, ctx: AppContext = Depends(get_context)):
    """Профиль из Telegram (getChat) и ссылка на последнее фото профиля"""
    bot = ctx.bot
    try:
        chat = await bot.get_chat(chat_id)

        photo_url = None
        photos = await bot.get_user_profile_photos(user_id=chat_id, limit=1)
        if photos.total_count > 0 and photos.photos:
            file = await bot.get_file(photos.photos[0][0].file_id)
            if file.file_path:
                photo_url = f"https://api.telegram.org/file/bot{bot.token}/{file.file_path}"

    except TelegramBadRequest as e:
        logger.warning(f"User profile not found for {chat_id}: {e}")
        return JSONResponse(status_code=404, content={"error": "User not found"})
    except Exception as e:
        logger.error(f"Error fetching user profile {chat_id}: {e}")
        return JSONResponse(status_code=500, content={"error": "Failed to fetch user profile"})

    return UserProfile(
        id=chat.id,
        first_name=chat.first_name or "",
        last_name=chat.last_name or "",
        username=chat.username or "",
        photo_url=photo_url,
    )
