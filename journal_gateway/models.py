"""
Request and result models for the journal insight gateway.

- AnalysisOptions: caller-supplied sampling values and prompt toggles
- AnalysisRequest: one validated inbound call
- AnalysisResult: the normalized record every provider adapter returns

Wire names are camelCase (``topP``, ``includeGoals``) as sent by the
browser front-end; snake_case names are accepted too.
"""
from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class AnalysisOptions(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    temperature: float | None = None
    top_p: float | None = Field(default=None, alias="topP")
    top_k: int | None = Field(default=None, alias="topK")  # Gemini only
    include_word_cloud: bool = Field(default=False, alias="includeWordCloud")
    include_mood_distribution: bool = Field(
        default=False, alias="includeMoodDistribution"
    )
    include_goals: bool = Field(default=False, alias="includeGoals")
    include_social_interactions: bool = Field(
        default=False, alias="includeSocialInteractions"
    )
    # Accepted for older clients; the Gemini prompt always asks for flow data.
    include_flow_data: bool = Field(default=False, alias="includeFlowData")


class AnalysisRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    text: str = Field(min_length=1)
    provider_id: str | None = None
    options: AnalysisOptions = Field(default_factory=AnalysisOptions)


class AnalysisResult(BaseModel):
    """Normalized adapter output.

    ``model_id`` is always set, even when the call failed, so callers can
    tell which model was asked. ``text`` is empty whenever ``error`` is set.
    """

    model_config = ConfigDict(frozen=True, protected_namespaces=())

    text: str = ""
    model_id: str
    error: str | None = None

    @classmethod
    def failure(cls, model_id: str, error: str) -> AnalysisResult:
        return cls(text="", model_id=model_id, error=error)

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_payload(self) -> dict[str, Any]:
        """Serialize to the wire shape ``{text, model, error?}``."""
        payload: dict[str, Any] = {"text": self.text, "model": self.model_id}
        if self.error is not None:
            payload["error"] = self.error
        return payload
