"""Pydantic schemas for user AI settings endpoints."""
from pydantic import BaseModel, Field, field_validator

from models.user_settings import SmartSelectorPreference, UserSettings

API_KEY_HINT_LENGTH = 4


class AiSettingsUpdate(BaseModel):
    """
    Schema for updating AI settings. Only fields that are set are written.

    An empty ``straico_api_key`` string is treated as "clear the key".
    """

    straico_api_key: str | None = None
    straico_model_id: str | None = Field(default=None, max_length=200)
    use_smart_selector: bool | None = None
    smart_selector_preference: SmartSelectorPreference | None = None

    @field_validator("straico_api_key")
    @classmethod
    def strip_key(cls, v: str | None) -> str | None:
        """Keys pasted from a dashboard often carry trailing whitespace."""
        if v is None:
            return None
        return v.strip() or None


class AiSettingsResponse(BaseModel):
    """Schema for AI settings. The API key itself is never returned."""

    has_api_key: bool
    api_key_hint: str | None
    straico_model_id: str | None
    use_smart_selector: bool
    smart_selector_preference: SmartSelectorPreference

    @classmethod
    def from_model(cls, settings: UserSettings) -> "AiSettingsResponse":
        """Build a masked response from the stored settings row."""
        key = settings.straico_api_key
        return cls(
            has_api_key=bool(key),
            api_key_hint=f"...{key[-API_KEY_HINT_LENGTH:]}" if key else None,
            straico_model_id=settings.straico_model_id,
            use_smart_selector=settings.use_smart_selector,
            smart_selector_preference=settings.smart_selector_preference,
        )


class ApiKeyVerifyRequest(BaseModel):
    """Schema for verifying a key before it is saved."""

    api_key: str


class ApiKeyVerifyResponse(BaseModel):
    """Result of verifying a Straico API key."""

    valid: bool
    error: str | None = None
    coins: float | None = None
