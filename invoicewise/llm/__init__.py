"""LLM module for line item suggestions using local or cloud models."""

from .client import LLMClient
from .parser import SuggestionParser

__all__ = ["LLMClient", "SuggestionParser"]
