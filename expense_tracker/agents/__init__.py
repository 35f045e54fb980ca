"""AI agents package."""

from expense_tracker.agents.translation_agent import (
    TranslationAssistant,
    TranslationError,
    build_translation_request,
)

__all__ = [
    "TranslationAssistant",
    "TranslationError",
    "build_translation_request",
]
