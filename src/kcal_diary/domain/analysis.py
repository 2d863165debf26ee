"""Models and errors for diary text analysis."""

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_ITEM_EMOJI = "🍽️"


class AnalysisItem(BaseModel):
    """Single food item returned by the model."""

    model_config = ConfigDict(extra="forbid", strict=True)

    name: str
    kcal: int = Field(ge=0)
    emoji: str = DEFAULT_ITEM_EMOJI


class DiaryAnalysis(BaseModel):
    """Structured output for a diary entry."""

    model_config = ConfigDict(extra="forbid", strict=True)

    total_kcal: int = Field(ge=0)
    items: list[AnalysisItem]
    ai_comment: str = ""


class AnalysisError(Exception):
    """Base error for a failed analysis."""


class AnalysisEmptyResponseError(AnalysisError):
    """The model returned no content."""


class AnalysisDecodeError(AnalysisError):
    """The model response did not match the expected schema."""


class AnalysisTransportError(AnalysisError):
    """The model service could not be reached or rejected the request."""
