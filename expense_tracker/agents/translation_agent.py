"""
Tax Optimization Translation Assistant

Given an expense, its current Bangla description and where it was incurred,
asks Gemini for a Bangla wording that reads well for tax compliance.

BOUNDARIES:
- CAN: Suggest a translation and explain the suggestion
- CANNOT: Change an expense. The user decides whether to apply it
- On any failure it raises TranslationError. There is no retry and no
  fallback text; the caller keeps the translation it already has.
"""

import json
from typing import Any, Optional

import google.generativeai as genai

from expense_tracker.config import GeminiSettings, get_settings
from expense_tracker.models.expense import (
    ExpenseRecord,
    GeolocationFix,
    TranslationRequest,
    TranslationSuggestion,
)


LOCATION_UNAVAILABLE = "User location not available"

PROMPT_TEMPLATE = """You are an expert in Bangla translation and financial compliance.

Given the following expense details, current translation, and expense location, recommend a Bangla translation that optimizes financial compliance for tax purposes.

Expense Details: {details}
Current Translation: {current_translation}
Expense Location: {location}

Provide the optimized translation and a brief explanation of why the translation was optimized for financial compliance.

Return the response in the following JSON format:
{{
  "optimizedTranslation": "<optimized Bangla translation>",
  "reasoning": "<explanation of optimization>"
}}"""


class TranslationError(Exception):
    """The assistant could not produce a suggestion."""
    pass


def build_translation_request(
    record: ExpenseRecord,
    fallback_location: Optional[GeolocationFix] = None,
) -> TranslationRequest:
    """
    Describe an expense for the assistant.

    Uses the expense's own location, then the current device location,
    then says the location is unknown.
    """
    details = (
        f"Type: {record.category_label}, "
        f"Amount: {record.amount} {record.currency}, "
        f"Details: {record.details}, "
        f"English Desc: {record.description_english}"
    )

    location = record.location or fallback_location
    return TranslationRequest(
        details=details,
        current_translation=record.description_bangla or None,
        location_description=location.describe() if location else LOCATION_UNAVAILABLE,
    )


class TranslationAssistant:
    """Gemini-backed Bangla translation suggestions."""

    def __init__(
        self,
        settings: Optional[GeminiSettings] = None,
        model: Optional[Any] = None,
    ):
        self._settings = settings or get_settings().gemini
        self._model = model or self._configure_genai()

    def _configure_genai(self):
        """Configure Google Generative AI."""
        genai.configure(api_key=self._settings.api_key)
        return genai.GenerativeModel(
            model_name=self._settings.model_name,
            generation_config={
                "temperature": self._settings.temperature,
                "max_output_tokens": self._settings.max_tokens,
            }
        )

    def build_prompt(self, request: TranslationRequest) -> str:
        return PROMPT_TEMPLATE.format(
            details=request.details,
            current_translation=request.current_translation or "",
            location=request.location_description,
        )

    async def optimize(self, request: TranslationRequest) -> TranslationSuggestion:
        """
        Ask for an optimized Bangla translation.

        Raises:
            TranslationError: If the model call fails or its reply has no
                usable suggestion
        """
        try:
            response = await self._model.generate_content_async(self.build_prompt(request))
            return self._parse_response(response.text)
        except Exception as e:
            raise TranslationError("Failed to get tax optimization suggestions.") from e

    @staticmethod
    def _parse_response(text: str) -> TranslationSuggestion:
        # The model sometimes wraps the JSON in prose or a code fence
        start = text.find("{")
        end = text.rfind("}") + 1
        if start < 0 or end <= start:
            raise ValueError("No JSON object in model response")

        data = json.loads(text[start:end])
        return TranslationSuggestion(
            optimized_translation=data["optimizedTranslation"],
            reasoning=data.get("reasoning", ""),
        )
