"""
Insight contract models.

These describe the JSON the prompts ask providers to return. The gateway
passes provider text through untouched; consumers that want typed access
(or want to check a reply against the contract) call ``parse_insights`` or
``parse_analysis`` themselves.
"""
from __future__ import annotations

import json
import re
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

_FENCE = re.compile(r"^\s*```(?:json)?\s*(.*?)\s*```\s*$", re.DOTALL)


class _Wire(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


# ---------- flow graph ----------

class FlowNodeData(_Wire):
    category: Literal["positive", "negative", "external", "internal"]


class FlowNode(_Wire):
    id: str
    label: str
    type: Literal["emotion", "factor"]
    data: FlowNodeData

    @model_validator(mode="before")
    @classmethod
    def _lift_category(cls, value: Any) -> Any:
        # Some replies put category on the node itself instead of under data.
        if isinstance(value, dict) and "data" not in value and "category" in value:
            value = {**value, "data": {"category": value["category"]}}
        return value

    @property
    def category(self) -> str:
        return self.data.category


class FlowEdge(_Wire):
    id: str
    source: str
    target: str
    label: str = ""


class FlowData(_Wire):
    nodes: list[FlowNode] = Field(default_factory=list)
    edges: list[FlowEdge] = Field(default_factory=list)

    @model_validator(mode="after")
    def _edges_reference_nodes(self) -> FlowData:
        node_ids = {node.id for node in self.nodes}
        dangling = [
            edge.id
            for edge in self.edges
            if edge.source not in node_ids or edge.target not in node_ids
        ]
        if dangling:
            raise ValueError(f"edges reference unknown nodes: {', '.join(dangling)}")
        return self


# ---------- structured insights (Gemini prompt) ----------

class EntryMetrics(_Wire):
    energy: float
    productivity: float


class MoodInfluencer(_Wire):
    influencer: str
    impact: float


class HealthMetrics(_Wire):
    sentiment: float
    physical_wellness: float = Field(alias="physicalWellness")
    mental_resilience: float = Field(alias="mentalResilience")


class ProgressMetrics(_Wire):
    health: float = 0
    resilience: float = 0
    academic: float = 0
    research: float = 0


class Trigger(_Wire):
    trigger: str
    emotion: str = ""
    context: str = ""


class EnergyPoint(_Wire):
    period: str
    level: float
    reason: str = ""


class GoalProgress(_Wire):
    goal: str
    progress: float = 0
    status: str = ""


class SleepAnalysis(_Wire):
    quality: str = ""
    hours: float | None = None
    impact: str = ""


class TextualAnalysis(_Wire):
    triggers: list[Trigger] = Field(default_factory=list)
    energy_tracking: list[EnergyPoint] = Field(
        default_factory=list, alias="energyTracking"
    )
    goal_progress: list[GoalProgress] = Field(
        default_factory=list, alias="goalProgress"
    )
    sleep_analysis: SleepAnalysis | None = Field(default=None, alias="sleepAnalysis")


class JournalInsights(_Wire):
    keywords: list[str] = Field(default_factory=list)
    metrics: list[EntryMetrics] = Field(default_factory=list)
    mood_influencers: list[MoodInfluencer] = Field(
        default_factory=list, alias="moodInfluencers"
    )
    emotion_distribution: list[dict[str, float]] = Field(
        default_factory=list, alias="emotionDistribution"
    )
    topic_hierarchy: list[str] = Field(default_factory=list, alias="topicHierarchy")
    flow_data: FlowData = Field(default_factory=FlowData, alias="flowData")
    health_metrics: list[HealthMetrics] = Field(
        default_factory=list, alias="healthMetrics"
    )
    progress_metrics: ProgressMetrics | None = Field(
        default=None, alias="progressMetrics"
    )
    textual_analysis: TextualAnalysis | None = Field(
        default=None, alias="textualAnalysis"
    )


# ---------- summary analysis (OpenAI / Claude prompts) ----------

class Sentiment(_Wire):
    overall: str
    score: float


class Topic(_Wire):
    name: str
    frequency: float = 0
    context: str = ""


class Pattern(_Wire):
    pattern: str
    significance: str = ""


class JournalAnalysis(_Wire):
    sentiment: Sentiment
    topics: list[Topic] = Field(default_factory=list)
    patterns: list[Pattern] = Field(default_factory=list)
    insights: list[str] = Field(default_factory=list)
    suggestions: list[str] = Field(default_factory=list)


def strip_code_fence(text: str) -> str:
    """Remove a surrounding Markdown code fence, which models often add."""
    match = _FENCE.match(text)
    return match.group(1) if match else text.strip()


def parse_insights(text: str) -> JournalInsights:
    """Parse a Gemini reply.

    Raises:
        json.JSONDecodeError: the reply is not JSON.
        pydantic.ValidationError: the JSON breaks the contract, e.g. an
            edge pointing at a node id that does not exist.
    """
    return JournalInsights.model_validate(json.loads(strip_code_fence(text)))


def parse_analysis(text: str) -> JournalAnalysis:
    """Parse an OpenAI or Claude reply."""
    return JournalAnalysis.model_validate(json.loads(strip_code_fence(text)))
