"""AI settings endpoints: Straico key, model preference and model discovery."""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_async_session, get_current_identity, get_straico_client
from api.helpers import error_detail, gateway_http_error
from core.auth import Identity
from schemas.straico import DetailedModels, ModelInfo, SystemStatus
from schemas.user_settings import (
    AiSettingsResponse,
    AiSettingsUpdate,
    ApiKeyVerifyRequest,
    ApiKeyVerifyResponse,
)
from services import settings_service
from services.straico_client import StraicoApiError, StraicoClient
from shared.errors import ErrorKind

router = APIRouter(prefix="/settings/ai", tags=["settings"])


async def _saved_api_key(db: AsyncSession, identity: Identity) -> str:
    settings = await settings_service.get_settings(db, identity.user_id)
    if settings is None or not settings.straico_api_key:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=error_detail(
                ErrorKind.AUTH, "No Straico API key configured. Add one in Settings.",
            ),
        )
    return settings.straico_api_key


@router.get("/", response_model=AiSettingsResponse)
async def get_ai_settings(
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_async_session),
) -> AiSettingsResponse:
    """Get the caller's AI settings (the key itself is masked)."""
    settings = await settings_service.get_or_create_settings(db, identity.user_id)
    return AiSettingsResponse.from_model(settings)


@router.patch("/", response_model=AiSettingsResponse)
async def update_ai_settings(
    data: AiSettingsUpdate,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_async_session),
) -> AiSettingsResponse:
    """Update the caller's AI settings. Only fields that are sent are changed."""
    settings = await settings_service.update_ai_settings(db, identity.user_id, data)
    return AiSettingsResponse.from_model(settings)


@router.delete("/api-key", response_model=AiSettingsResponse)
async def delete_api_key(
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_async_session),
) -> AiSettingsResponse:
    """Remove the stored Straico key and the model chosen with it."""
    settings = await settings_service.clear_api_key(db, identity.user_id)
    return AiSettingsResponse.from_model(settings)


@router.post("/verify", response_model=ApiKeyVerifyResponse)
async def verify_api_key(
    data: ApiKeyVerifyRequest,
    _identity: Identity = Depends(get_current_identity),
    client: StraicoClient = Depends(get_straico_client),
) -> ApiKeyVerifyResponse:
    """
    Check a key against Straico before saving it.

    An invalid key is a normal outcome (``valid: false``); only gateway outages
    are errors.
    """
    try:
        user = await client.verify_api_key(data.api_key.strip())
    except StraicoApiError as e:
        if e.kind in (ErrorKind.VALIDATION, ErrorKind.AUTH):
            return ApiKeyVerifyResponse(valid=False, error=e.message)
        raise gateway_http_error(e) from e
    return ApiKeyVerifyResponse(valid=True, coins=user.coins)


@router.get("/models", response_model=list[ModelInfo])
async def list_models(
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_async_session),
    client: StraicoClient = Depends(get_straico_client),
) -> list[ModelInfo]:
    """List chat models available to the caller's Straico key."""
    api_key = await _saved_api_key(db, identity)
    try:
        return await client.list_models(api_key)
    except StraicoApiError as e:
        raise gateway_http_error(e) from e


@router.get("/models/detailed", response_model=DetailedModels)
async def list_detailed_models(
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_async_session),
    client: StraicoClient = Depends(get_straico_client),
) -> DetailedModels:
    """List chat and image models with descriptions, pros and cons."""
    api_key = await _saved_api_key(db, identity)
    try:
        return await client.list_detailed_models(api_key)
    except StraicoApiError as e:
        raise gateway_http_error(e) from e


@router.get("/status", response_model=SystemStatus)
async def get_status(
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_async_session),
    client: StraicoClient = Depends(get_straico_client),
) -> SystemStatus:
    """Connectivity check for the saved key: account info and model count."""
    api_key = await _saved_api_key(db, identity)
    return await client.get_system_status(api_key)
