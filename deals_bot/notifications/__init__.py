from .broadcaster import (
    BroadcastPayload,
    BroadcastResult,
    BroadcastStatus,
    NotificationBroadcaster,
)

__all__ = [
    "BroadcastPayload",
    "BroadcastResult",
    "BroadcastStatus",
    "NotificationBroadcaster",
]
