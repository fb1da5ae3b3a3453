"""Generate AI summaries of bookmarks through Straico using the user's settings."""
import logging
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from models.user_settings import SmartSelectorPreference
from schemas.bookmark import BookmarkResponse
from schemas.straico import CompletionResult
from schemas.summary import SummaryRequest
from services import settings_service
from services.straico_client import StraicoApiError, StraicoClient
from shared.errors import ErrorKind

logger = logging.getLogger(__name__)

URL_SUMMARY_PROMPT = (
    "Please provide a comprehensive summary of the content at this URL: {content}. "
    "Focus on the key points, main ideas, and important details."
)
TEXT_SUMMARY_PROMPT = (
    "Please provide a comprehensive summary of the following content: {content}. "
    "Focus on the key points, main ideas, and important details."
)
NO_API_KEY_MESSAGE = (
    "No Straico API key configured. Please add your API key in Settings to "
    "generate summaries."
)
NO_MODEL_MESSAGE = (
    "No AI model selected. Please choose a model or enable the smart selector in Settings."
)


def build_summary_prompt(content: str, custom_prompt: str | None = None) -> str:
    """The message sent to the model: a custom prompt wins, else URL or text wording."""
    if custom_prompt and custom_prompt.strip():
        return custom_prompt.strip()
    template = URL_SUMMARY_PROMPT if content.startswith("http") else TEXT_SUMMARY_PROMPT
    return template.format(content=content)


async def generate_summary(
    db: AsyncSession,
    client: StraicoClient,
    user_id: UUID,
    bookmark: BookmarkResponse,
    options: SummaryRequest,
) -> CompletionResult:
    """
    Summarize a bookmark's URL with the user's Straico key.

    Model choice: an explicit ``model_id`` or ``smart_selector`` in the request,
    otherwise the saved smart-selector preference when enabled, otherwise the
    saved model.

    Raises:
        StraicoApiError: AUTH when no key is saved, VALIDATION when no model can be
            chosen, otherwise whatever the gateway reports.
    """
    settings = await settings_service.get_settings(db, user_id)
    if settings is None or not settings.straico_api_key:
        raise StraicoApiError(ErrorKind.AUTH, NO_API_KEY_MESSAGE)

    model: str | None = None
    smart_selector: SmartSelectorPreference | None = None
    if options.smart_selector is not None:
        smart_selector = options.smart_selector
    elif options.model_id:
        model = options.model_id
    elif settings.use_smart_selector:
        smart_selector = SmartSelectorPreference(settings.smart_selector_preference)
    elif settings.straico_model_id:
        model = settings.straico_model_id
    else:
        raise StraicoApiError(ErrorKind.VALIDATION, NO_MODEL_MESSAGE)

    logger.info(
        "Generating summary for bookmark %s (model=%s, selector=%s)",
        bookmark.id,
        model,
        smart_selector,
    )
    return await client.prompt_completion(
        settings.straico_api_key,
        build_summary_prompt(bookmark.url, options.custom_prompt),
        model=model,
        smart_selector=smart_selector,
        temperature=options.temperature,
        max_tokens=options.max_tokens,
    )
