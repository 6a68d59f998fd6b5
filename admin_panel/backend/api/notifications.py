"""
Messaging API: direct message to one chat and broadcast to all users.
"""
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from loguru import logger

from deals_bot.context import AppContext
from deals_bot.notifications import BroadcastPayload, BroadcastStatus
from ..dependencies import get_context
from ..schemas import NotificationRequest, NotificationResponse, SendMessageRequest, StatusResponse

router = APIRouter(tags=["Notifications"])

STATUS_MESSAGES = {
    BroadcastStatus.ALL_SUCCEEDED: "Notification sent to all users!",
    BroadcastStatus.PARTIAL: "Notification sent with some failures.",
    BroadcastStatus.ALL_FAILED: "Failed to send notifications.",
    BroadcastStatus.NO_RECIPIENTS: "No users to notify.",
}


@router.post("/api/send-message", response_model=StatusResponse)
async def send_message(req: SendMessageRequest, ctx: AppContext = Depends(get_context)):
    try:
        await ctx.bot.send_message(chat_id=req.chat_id, text=req.message, parse_mode=None)
    except Exception as e:
        logger.error(f"Error sending message to {req.chat_id}: {e}")
        return JSONResponse(
            status_code=500,
            content={"success": False, "message": "Failed to send message."},
        )
    return StatusResponse(success=True, message="Message sent successfully!")


@router.post("/admin/send-notification", response_model=NotificationResponse)
async def send_notification(req: NotificationRequest, ctx: AppContext = Depends(get_context)):
    """
    Рассылка всем зарегистрированным пользователям.

    Частичный провал не считается ошибкой: ответ 200 со status="partial" и
    ошибками по каждому чату. success=false только если не доставлено никому.
    """
    recipients = await ctx.stores.users.list_chat_ids()
    result = await ctx.broadcaster.broadcast(
        BroadcastPayload(text=req.text, image=req.image, link=req.link),
        recipients,
    )

    return NotificationResponse(
        success=result.status != BroadcastStatus.ALL_FAILED,
        status=result.status.value,
        message=STATUS_MESSAGES[result.status],
        success_count=result.success_count,
        failure_count=result.failure_count,
        errors={str(chat_id): error for chat_id, error in result.errors.items()},
    )
