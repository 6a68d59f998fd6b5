from .products import router as products_router
from .analytics import router as analytics_router
from .deals import router as deals_router
from .notifications import router as notifications_router
from .users import router as users_router
from .webhook import telegram_webhook

__all__ = [
    "products_router",
    "analytics_router",
    "deals_router",
    "notifications_router",
    "users_router",
    "telegram_webhook",
]
