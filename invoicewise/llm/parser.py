"""
LLM response parser for line item suggestions.

Handles:
- JSON extraction from LLM responses
- Schema validation of the suggestions payload
- Rounding and capping of the returned suggestions
"""

import json
import logging
import math
import re
from typing import Any, Optional

from pydantic import BaseModel, ValidationError, field_validator

from invoicewise.models.invoice import ItemSuggestion, SuggestionResult

logger = logging.getLogger(__name__)

DEFAULT_MAX_SUGGESTIONS = 3


class SuggestionPayloadItem(BaseModel):
    """One entry of the model's ``suggestions`` array."""
    description: str
    amount: float

    @field_validator("description", mode="before")
    @classmethod
    def _description_is_text(cls, value: Any) -> str:
        if not isinstance(value, str):
            raise ValueError("description must be a string")
        value = value.strip()
        if not value:
            raise ValueError("description must not be empty")
        return value

    @field_validator("amount", mode="before")
    @classmethod
    def _amount_is_number(cls, value: Any) -> Any:
        # bool is an int subclass; "12.50" would be coerced without this check
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError("amount must be a number")
        return value

    @field_validator("amount")
    @classmethod
    def _amount_in_range(cls, value: float) -> float:
        if not math.isfinite(value):
            raise ValueError("amount must be finite")
        if value < 0:
            raise ValueError("amount must not be negative")
        return round(value, 2)


class SuggestionsPayload(BaseModel):
    """Expected reply shape: {"suggestions": [{"description": ..., "amount": ...}]}."""
    suggestions: list[SuggestionPayloadItem]


class SuggestionParser:
    """
    Parses LLM responses into validated suggestions.

    A reply either validates as a whole or is rejected; a single bad
    entry fails the response.
    """

    def __init__(self, max_suggestions: int = DEFAULT_MAX_SUGGESTIONS):
        self.max_suggestions = max_suggestions

    def parse_response(self, response: str) -> SuggestionResult:
        """
        Parse LLM response and extract suggestions.

        Args:
            response: Raw LLM response string

        Returns:
            SuggestionResult with parsed suggestions or errors
        """
        errors = []
        warnings = []

        json_str = self._extract_json(response or "")

        if not json_str:
            errors.append("No valid JSON found in response")
            return SuggestionResult(
                success=False,
                raw_response=response,
                errors=errors,
                warnings=warnings,
            )

        try:
            data = json.loads(json_str)
        except (ValueError, RecursionError) as e:
            errors.append(f"JSON parse error: {str(e)}")
            return SuggestionResult(
                success=False,
                raw_response=response,
                errors=errors,
                warnings=warnings,
            )

        # The prompt asks for "a JSON array", so a bare list is accepted too
        if isinstance(data, list):
            data = {"suggestions": data}

        try:
            payload = SuggestionsPayload.model_validate(data)
        except ValidationError as e:
            for error in e.errors():
                location = ".".join(str(part) for part in error["loc"])
                errors.append(f"Schema error at {location or 'root'}: {error['msg']}")
            return SuggestionResult(
                success=False,
                raw_response=response,
                errors=errors,
                warnings=warnings,
            )

        items = payload.suggestions
        if not items:
            warnings.append("Model returned no suggestions")
        if len(items) > self.max_suggestions:
            warnings.append(
                f"Model returned {len(items)} suggestions; keeping the first {self.max_suggestions}"
            )
            logger.debug(warnings[-1])
            items = items[: self.max_suggestions]

        return SuggestionResult(
            success=True,
            suggestions=[
                ItemSuggestion(description=item.description, amount=item.amount)
                for item in items
            ],
            raw_response=response,
            provider_used=None,  # Will be set by caller
            errors=errors,
            warnings=warnings,
        )

    def _extract_json(self, response: str) -> Optional[str]:
        """Extract a JSON object or array from response string."""
        # Try to find JSON block in markdown code blocks
        code_block_pattern = r"```(?:json)?\s*([\{\[][\s\S]*?[\}\]])\s*```"
        match = re.search(code_block_pattern, response)
        if match:
            return match.group(1)

        # Try the entire response as JSON
        if self._is_json(response.strip()):
            return response.strip()

        # Try raw JSON spans, outermost bracket first
        matches = [
            m for m in (re.search(p, response) for p in (r"(\{[\s\S]*\})", r"(\[[\s\S]*\])"))
            if m
        ]
        for match in sorted(matches, key=lambda m: m.start()):
            if self._is_json(match.group(1)):
                return match.group(1)

        return None

    @staticmethod
    def _is_json(text: str) -> bool:
        try:
            json.loads(text)
        except (ValueError, RecursionError):
            return False
        return bool(text)


def parse_llm_response(response: str) -> SuggestionResult:
    """
    Convenience function to parse an LLM response.

    Args:
        response: Raw LLM response

    Returns:
        SuggestionResult with parsed suggestions
    """
    parser = SuggestionParser()
    return parser.parse_response(response)
