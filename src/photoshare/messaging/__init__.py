"""
Messaging module - in-process notification bus.
"""

from __future__ import annotations

from .bus import PHOTO_ADDED, NotificationBus, Subscription

__all__ = [
    "NotificationBus",
    "Subscription",
    "PHOTO_ADDED",
]
