"""
Line item suggestion service.

Turns free-text keywords into up to three (description, amount) pairs by
asking the configured LLM provider. Every failure past input validation is
reported as a single SuggestionError; the cause is logged and chained but
never shown to the user.
"""

import logging
from typing import Optional

from invoicewise.config import AppConfig, LLMProvider, get_config
from invoicewise.llm.client import LLMClient, LLMClientError
from invoicewise.llm.parser import SuggestionParser
from invoicewise.models.invoice import ItemSuggestion

logger = logging.getLogger(__name__)

SUGGESTION_FAILED_MESSAGE = "Failed to get suggestions. Please try again."
NO_KEYWORDS_MESSAGE = "Please enter some keywords to get suggestions."


class SuggestionError(Exception):
    """The suggestion request failed for any reason."""

    def __init__(self, message: str = SUGGESTION_FAILED_MESSAGE):
        super().__init__(message)


class EmptyKeywordsError(ValueError):
    """Keywords were empty or whitespace only."""

    def __init__(self, message: str = NO_KEYWORDS_MESSAGE):
        super().__init__(message)


def suggest_items(
    keywords: Optional[str],
    client: Optional[LLMClient] = None,
    provider: Optional[LLMProvider] = None,
    config: Optional[AppConfig] = None,
) -> list[ItemSuggestion]:
    """
    Get line item suggestions for the given keywords.

    Args:
        keywords: Free text describing the product or service
        client: LLM client to use (created from config if omitted)
        provider: Specific provider to use (optional)
        config: Application configuration

    Returns:
        Up to three ItemSuggestion objects, amounts rounded to 2 places

    Raises:
        EmptyKeywordsError: If keywords are empty or whitespace only.
            Raised before any network call is made.
        SuggestionError: On any transport, provider or schema failure
    """
    if keywords is None or not str(keywords).strip():
        raise EmptyKeywordsError()

    config = config or get_config()
    client = client or LLMClient(config=config, preferred_provider=provider)
    parser = SuggestionParser(max_suggestions=config.max_suggestions)

    try:
        response, used_provider = client.suggest_items(keywords, provider=provider)
    except LLMClientError as e:
        logger.error(f"Suggestion request failed: {e}")
        raise SuggestionError() from e
    except Exception as e:
        logger.exception("Unexpected error while requesting suggestions")
        raise SuggestionError() from e

    try:
        result = parser.parse_response(response)
    except Exception as e:
        logger.exception(f"Could not parse suggestion response from {used_provider.value}")
        raise SuggestionError() from e
    result.provider_used = used_provider.value

    if not result.success:
        logger.error(
            f"Invalid suggestion response from {used_provider.value}: {'; '.join(result.errors)}"
        )
        logger.debug(f"Raw response: {result.raw_response!r}")
        raise SuggestionError()

    for warning in result.warnings:
        logger.warning(warning)

    logger.info(f"Got {len(result.suggestions)} suggestions from {used_provider.value}")
    return result.suggestions
