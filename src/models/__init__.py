"""SQLAlchemy models."""
from models.analytics_event import AnalyticsAction, AnalyticsEvent, status_action
from models.base import Base, TimestampMixin, UUIDv7Mixin
from models.bookmark import Bookmark, BookmarkStatus
from models.category import Category
from models.tag import Tag, bookmark_tags
from models.user_settings import SmartSelectorPreference, UserSettings

__all__ = [
    "AnalyticsAction",
    "AnalyticsEvent",
    "Base",
    "Bookmark",
    "BookmarkStatus",
    "Category",
    "SmartSelectorPreference",
    "Tag",
    "TimestampMixin",
    "UUIDv7Mixin",
    "UserSettings",
    "bookmark_tags",
    "status_action",
]
