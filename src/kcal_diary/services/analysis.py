"""Diary text analysis service using LLMs."""

import logging
from dataclasses import dataclass
from typing import Protocol

from pydantic import ValidationError

from kcal_diary.domain.analysis import (
    AnalysisDecodeError,
    AnalysisEmptyResponseError,
    DiaryAnalysis,
)

_logger = logging.getLogger(__name__)

ANALYSIS_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "total_kcal": {"type": "integer", "minimum": 0},
        "items": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "name": {"type": "string"},
                    "kcal": {"type": "integer", "minimum": 0},
                    "emoji": {"type": "string"},
                },
                "required": ["name", "kcal", "emoji"],
                "additionalProperties": False,
            },
        },
        "ai_comment": {"type": "string"},
    },
    "required": ["total_kcal", "items", "ai_comment"],
    "additionalProperties": False,
}

ANALYSIS_INSTRUCTIONS = (
    "You are a kind and knowledgeable nutrition coach reading the user's food "
    "diary.\n"
    "1) Extract every food from the text with an approximate calorie count.\n"
    "2) Put a fitting emoji for each food in the emoji field.\n"
    "3) In ai_comment, write a warm, comforting comment of one or two "
    "sentences that empathizes with the user's mood or situation (busy, "
    "down, happy, ...). Write it in the same language as the user.\n"
    "Return only JSON in the following shape and nothing else:\n"
    '{"total_kcal": <sum of calories>, "items": [{"name": "<food>", '
    '"kcal": <calories>, "emoji": "<emoji>"}], "ai_comment": "<comment>"}\n'
    'Example input: "Too busy, grabbed two rice balls at the convenience '
    'store"\n'
    'Example output: {"total_kcal": 400, "items": [{"name": "rice ball", '
    '"kcal": 200, "emoji": "🍙"}, {"name": "rice ball", "kcal": 200, '
    '"emoji": "🍙"}], "ai_comment": "You still made time to eat on a busy '
    'day, well done. How about a warm soup tomorrow? 😊"}'
)


class AnalysisClient(Protocol):
    """Interface for LLM text analysis."""

    async def generate(  # noqa: PLR0913
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        instructions: str,
        text: str,
        schema: dict[str, object],
    ) -> str | None:
        """Return the raw model output text."""


@dataclass
class AnalysisService:
    """Service that prompts the model and validates its diary analysis."""

    client: AnalysisClient
    model: str
    reasoning_effort: str | None
    store: bool

    async def analyze(self, text: str) -> DiaryAnalysis:
        """Extract foods, calories and a comment from diary text."""
        _logger.info("Analyzing diary entry: chars=%s", len(text))
        raw = await self.client.generate(
            model=self.model,
            reasoning_effort=self.reasoning_effort,
            store=self.store,
            instructions=ANALYSIS_INSTRUCTIONS,
            text=text,
            schema=ANALYSIS_SCHEMA,
        )
        return decode_analysis(raw)


def decode_analysis(raw: str | None) -> DiaryAnalysis:
    """Validate raw model output against the analysis contract."""
    if raw is None or not raw.strip():
        raise AnalysisEmptyResponseError("empty response")
    try:
        return DiaryAnalysis.model_validate_json(raw)
    except ValidationError as exc:
        raise AnalysisDecodeError(_describe_validation_error(exc)) from exc


def _describe_validation_error(exc: ValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "invalid response"
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()))
    message = str(first.get("msg", "invalid value"))
    if location:
        return f"invalid response at {location}: {message}"
    return f"invalid response: {message}"
