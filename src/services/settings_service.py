"""Service layer for per-user AI summary settings."""
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from models.base import utc_now
from models.user_settings import UserSettings
from schemas.user_settings import AiSettingsUpdate


async def get_settings(db: AsyncSession, user_id: UUID) -> UserSettings | None:
    """Get a user's settings row, or None if they have never saved any."""
    result = await db.execute(
        select(UserSettings).where(UserSettings.user_id == user_id),
    )
    return result.scalar_one_or_none()


async def get_or_create_settings(db: AsyncSession, user_id: UUID) -> UserSettings:
    """
    Get a user's settings, creating a row with defaults if needed.

    Note: Uses flush(), not commit. The caller's session handles the commit.
    """
    settings = await get_settings(db, user_id)
    if settings is None:
        settings = UserSettings(user_id=user_id)
        db.add(settings)
        await db.flush()
    return settings


async def update_ai_settings(
    db: AsyncSession,
    user_id: UUID,
    data: AiSettingsUpdate,
) -> UserSettings:
    """
    Update the AI settings fields that were explicitly set (upsert on user_id).

    Returns:
        The updated settings row.
    """
    settings = await get_or_create_settings(db, user_id)
    for field, value in data.model_dump(exclude_unset=True).items():
        if field in {"use_smart_selector", "smart_selector_preference"} and value is None:
            continue
        setattr(settings, field, value)
    settings.updated_at = utc_now()
    await db.flush()
    return settings


async def clear_api_key(db: AsyncSession, user_id: UUID) -> UserSettings:
    """Remove the stored API key and the model chosen with it."""
    settings = await get_or_create_settings(db, user_id)
    settings.straico_api_key = None
    settings.straico_model_id = None
    settings.updated_at = utc_now()
    await db.flush()
    return settings
