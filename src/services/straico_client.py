"""
HTTP client for the Straico LLM gateway.

Each call is authorized with the user's own API key. Failures of any sort leave
this module as StraicoApiError carrying an ErrorKind, so callers never inspect
message text. No call is retried.
"""
import logging
from typing import Any

import httpx

from models.user_settings import SmartSelectorPreference
from schemas.straico import (
    CompletionResult,
    DetailedModelInfo,
    DetailedModels,
    ModelInfo,
    StraicoUser,
    SystemStatus,
    WordUsage,
)
from shared.errors import STRAICO_NETWORK_MESSAGE, ErrorKind, parse_straico_error

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.straico.com"
DEFAULT_TIMEOUT = 60.0
DEFAULT_TEMPERATURE = 0.7
DEFAULT_MAX_TOKENS = 500
MIN_API_KEY_LENGTH = 10

MISSING_KEY_MESSAGE = "API key is required. Please enter your Straico API key in Settings."


class StraicoApiError(Exception):
    """Raised for every failed Straico call."""

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        status_code: int | None = None,
    ) -> None:
        self.kind = kind
        self.message = message
        self.status_code = status_code
        super().__init__(message)


def validate_api_key_format(api_key: str | None) -> str | None:
    """
    Check a key's shape without calling the API.

    Returns:
        None if the format looks right, otherwise a message describing the problem.
    """
    if not api_key or not isinstance(api_key, str):
        return "API key is required"
    if any(ch in api_key for ch in (" ", "\n", "\t")):
        return "API key cannot contain spaces or line breaks"
    if len(api_key) < MIN_API_KEY_LENGTH:
        return f"API key must be at least {MIN_API_KEY_LENGTH} characters"
    return None


def _provider_of(model_id: str) -> str:
    return model_id.split("/")[0] if "/" in model_id else "Unknown"


class StraicoClient:
    """
    Typed wrapper over the Straico REST API.

    The httpx.AsyncClient is owned by the caller (the application lifespan), so
    connections are pooled across users and requests.
    """

    def __init__(self, http_client: httpx.AsyncClient) -> None:
        self._http = http_client

    @classmethod
    def create_http_client(
        cls,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> httpx.AsyncClient:
        """Build the shared httpx client used by StraicoClient."""
        return httpx.AsyncClient(base_url=base_url, timeout=timeout)

    async def _request(
        self,
        method: str,
        path: str,
        api_key: str | None,
        json: dict[str, Any] | None = None,
    ) -> Any:
        """
        Make an authenticated request and return the envelope's ``data``.

        Raises:
            StraicoApiError: For a missing key, transport failure, error status, or
                a ``success: false`` body.
        """
        if not api_key or not api_key.strip():
            raise StraicoApiError(ErrorKind.AUTH, MISSING_KEY_MESSAGE)

        try:
            response = await self._http.request(
                method,
                path,
                json=json,
                headers={"Authorization": f"Bearer {api_key.strip()}"},
            )
        except httpx.TimeoutException as e:
            logger.warning("Straico request %s %s timed out", method, path)
            raise StraicoApiError(
                ErrorKind.NETWORK, "Straico API request timed out. Please try again.",
            ) from e
        except httpx.RequestError as e:
            logger.warning("Straico request %s %s failed: %s", method, path, e)
            raise StraicoApiError(ErrorKind.NETWORK, STRAICO_NETWORK_MESSAGE) from e

        if not response.is_success:
            parsed = parse_straico_error(response)
            logger.info(
                "Straico %s %s returned %s (%s)", method, path, response.status_code, parsed.kind,
            )
            raise StraicoApiError(parsed.kind, parsed.message, parsed.status_code)

        try:
            body = response.json()
        except ValueError as e:
            raise StraicoApiError(
                ErrorKind.SERVER, "Straico returned an invalid response.", response.status_code,
            ) from e

        if not isinstance(body, dict) or not body.get("success", False):
            message = body.get("message") if isinstance(body, dict) else None
            raise StraicoApiError(
                ErrorKind.SERVER, message or "API request failed", response.status_code,
            )
        return body.get("data")

    async def get_user_info(self, api_key: str) -> StraicoUser:
        """Account info (name, coin balance, plan)."""
        data = await self._request("GET", "/v0/user", api_key)
        return StraicoUser.model_validate(data or {})

    async def list_models(self, api_key: str) -> list[ModelInfo]:
        """Available chat models, normalized for display."""
        data = await self._request("GET", "/v0/models", api_key)
        models = []
        for item in data or []:
            model_id = item.get("model")
            if not model_id:
                continue
            pricing = item.get("pricing")
            models.append(
                ModelInfo(
                    id=model_id,
                    name=item.get("name") or model_id,
                    provider=_provider_of(model_id),
                    pricing=(
                        f"{pricing.get('coins')} coins per {pricing.get('words')} words"
                        if isinstance(pricing, dict)
                        else None
                    ),
                    max_tokens=item.get("max_output"),
                ),
            )
        return models

    async def list_detailed_models(self, api_key: str) -> DetailedModels:
        """Chat and image models with descriptions, pros, cons and applications."""
        data = await self._request("GET", "/v1/models", api_key) or {}

        def convert(item: dict[str, Any]) -> DetailedModelInfo:
            metadata = item.get("metadata") or {}
            return DetailedModelInfo(
                id=item["model"],
                name=item.get("name") or item["model"],
                provider=_provider_of(item["model"]),
                description=metadata.get("description"),
                pros=metadata.get("pros") or [],
                cons=metadata.get("cons") or [],
                applications=metadata.get("applications") or [],
                word_limit=item.get("word_limit"),
                pricing=item.get("pricing"),
            )

        return DetailedModels(
            chat=[convert(m) for m in data.get("chat") or [] if m.get("model")],
            image=[convert(m) for m in data.get("image") or [] if m.get("model")],
        )

    async def prompt_completion(  # noqa: PLR0913
        self,
        api_key: str,
        message: str,
        model: str | None = None,
        smart_selector: SmartSelectorPreference | None = None,
        temperature: float = DEFAULT_TEMPERATURE,
        max_tokens: int = DEFAULT_MAX_TOKENS,
    ) -> CompletionResult:
        """
        Run a single prompt completion.

        Exactly one of ``model`` or ``smart_selector`` must be given; with a smart
        selector Straico picks the model and explains why.

        Raises:
            StraicoApiError: VALIDATION if neither or both of model/smart_selector
                are given, otherwise as for any call.
        """
        if (model is None) == (smart_selector is None):
            raise StraicoApiError(
                ErrorKind.VALIDATION, "Choose either a model or a smart selector.",
            )

        body: dict[str, Any] = {
            "message": message,
            "temperature": temperature,
            "max_tokens": max_tokens,
            "replace_failed_models": True,
        }
        if smart_selector is not None:
            body["smart_llm_selector"] = SmartSelectorPreference(smart_selector).value
        else:
            body["model"] = model

        data = await self._request("POST", "/v0/prompt/completion", api_key, json=body) or {}
        completion = data.get("completion") or {}
        choices = completion.get("choices") or []
        content = ""
        if choices:
            content = ((choices[0] or {}).get("message") or {}).get("content") or ""
        if not content.strip():
            raise StraicoApiError(ErrorKind.SERVER, "Straico returned an empty completion.")

        price = data.get("price") or {}
        return CompletionResult(
            content=content.strip(),
            model=completion.get("model") or model,
            provider=completion.get("provider"),
            words=WordUsage.model_validate(data.get("words") or {}),
            price=price.get("total") if isinstance(price, dict) else None,
            selector_justification=data.get("model_selector_justification"),
        )

    async def verify_api_key(self, api_key: str) -> StraicoUser:
        """
        Check a key's format, then prove it works by fetching account info.

        Raises:
            StraicoApiError: VALIDATION for a malformed key, otherwise as for any call.
        """
        problem = validate_api_key_format(api_key)
        if problem is not None:
            raise StraicoApiError(ErrorKind.VALIDATION, problem)
        return await self.get_user_info(api_key)

    async def get_system_status(self, api_key: str) -> SystemStatus:
        """Fetch account info and model count, recording each failure instead of raising."""
        status = SystemStatus()
        try:
            status.user = await self.get_user_info(api_key)
        except StraicoApiError as e:
            status.user_error = e.message
        try:
            status.model_count = len(await self.list_models(api_key))
        except StraicoApiError as e:
            status.models_error = e.message
        return status
