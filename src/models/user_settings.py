"""UserSettings model for storing per-user AI summary preferences."""
from enum import StrEnum
from uuid import UUID

from sqlalchemy import Boolean, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base, TimestampMixin


class SmartSelectorPreference(StrEnum):
    """Straico smart-selector strategies."""

    QUALITY = "quality"
    BALANCE = "balance"
    BUDGET = "budget"


class UserSettings(Base, TimestampMixin):
    """
    User settings - one row per user, created lazily on first access.

    straico_api_key is never returned by the API; responses expose only whether a
    key is set and its last four characters.
    """

    __tablename__ = "user_settings"

    user_id: Mapped[UUID] = mapped_column(Uuid, primary_key=True)
    straico_api_key: Mapped[str | None] = mapped_column(Text, nullable=True)
    straico_model_id: Mapped[str | None] = mapped_column(String(200), nullable=True)
    use_smart_selector: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False,
    )
    smart_selector_preference: Mapped[str] = mapped_column(
        String(20), nullable=False, default=SmartSelectorPreference.QUALITY.value,
    )
