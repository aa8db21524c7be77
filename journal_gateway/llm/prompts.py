"""
Prompt templates for journal analysis, one builder per provider.

Templates are plain data; builders only substitute the journal text and
append the optional analysis lines. Each prompt ends with a JSON-only
directive followed by an example of the expected shape. The shape is a
request to the provider, not something the gateway checks.
"""

from __future__ import annotations

from collections.abc import Callable
from string import Template

from journal_gateway.models import AnalysisOptions

PromptBuilder = Callable[[str, AnalysisOptions], str]

GEMINI_TEMPLATE = Template("""
You are a professional journal analyzer. Analyze the following journal entries and provide insights:

$entries

Please provide the following analysis:
1. Extract keywords for a word cloud (array of strings, most important first)
2. For each entry, estimate energy (1-10) and productivity (1-10)
3. List top mood influencers (array of {influencer, impact})
4. For each entry, estimate emotion distribution (object with keys: joy, sadness, anger, fear, surprise, disgust, values 0-1)
5. List topic hierarchy (array of strings, most important first)
6. Flow data showing relationships between emotions and factors:
   - Extract positive and negative emotions
   - Identify external and internal factors
   - Create nodes for each emotion and factor
   - Create edges showing relationships between factors and emotions
   - Every edge source and target must be the id of a node in the same nodes list
7. For each entry, estimate health metrics: sentiment (0-100), physicalWellness (0-100), mentalResilience (0-100)
8. Progress metrics (object: health, resilience, academic, research, 0-100)
9. Textual analysis records:
   - Emotional triggers with the situation that caused them
   - Energy tracking: when energy rose or dropped and why
   - Goal progress: goals mentioned and how far along each one is
   - Sleep analysis: sleep quality and its effect on the day

Format your response as JSON with the following structure:
{
  "keywords": string[],
  "metrics": {"energy": number, "productivity": number}[],
  "moodInfluencers": {"influencer": string, "impact": number}[],
  "emotionDistribution": Record<string, number>[],
  "topicHierarchy": string[],
  "flowData": {
    "nodes": [
      {
        "id": string,
        "label": string,
        "type": "emotion" | "factor",
        "data": {
          "category": "positive" | "negative" | "external" | "internal"
        }
      }
    ],
    "edges": [
      {
        "id": string,
        "source": string,
        "target": string,
        "label": string
      }
    ]
  },
  "healthMetrics": {"sentiment": number, "physicalWellness": number, "mentalResilience": number}[],
  "progressMetrics": {"health": number, "resilience": number, "academic": number, "research": number},
  "textualAnalysis": {
    "triggers": {"trigger": string, "emotion": string, "context": string}[],
    "energyTracking": {"period": string, "level": number, "reason": string}[],
    "goalProgress": {"goal": string, "progress": number, "status": string}[],
    "sleepAnalysis": {"quality": string, "hours": number | null, "impact": string}
  }
}
Return ONLY valid JSON.
""")

OPENAI_TEMPLATE = Template("""
Analyze the following journal entries and provide detailed insights:

$entries

Please provide the following analysis as a JSON object:
1. Overall sentiment analysis (include a score from -10 to +10)
2. Key topics discussed with their frequency and context
3. Patterns and trends identified with their significance
4. Personalized insights based on the entries
5. Actionable suggestions for the journal writer
""")

CLAUDE_TEMPLATE = Template("""
Analyze the following journal entries and provide comprehensive insights:

$entries

Please provide the following analysis in a JSON format:
1. Overall sentiment analysis with a score from -10 to +10
2. Key topics discussed with their frequency and context
3. Patterns and trends identified with their significance
4. Personalized insights based on the journal content
5. Actionable suggestions for the journal writer
""")

# (option attribute, instruction line); one line per enabled flag
OPTIONAL_ANALYSES: tuple[tuple[str, str], ...] = (
    ("include_word_cloud", "6. Most frequently used words and their context"),
    ("include_mood_distribution", "7. Mood distribution and emotional patterns"),
    ("include_goals", "8. Goals mentioned and progress tracking"),
    ("include_social_interactions", "9. People mentioned and relationship dynamics"),
)

ANALYSIS_JSON_SHAPE = """

Return ONLY a valid JSON object with the following structure:
{
    "sentiment": { "overall": "string description", "score": number },
    "topics": [{ "name": "string", "frequency": number, "context": "string" }],
    "patterns": [{ "pattern": "string", "significance": "string" }],
    "insights": ["string"],
    "suggestions": ["string"]
}"""


def optional_analysis_lines(options: AnalysisOptions) -> list[str]:
    return [line for flag, line in OPTIONAL_ANALYSES if getattr(options, flag)]


def _render_analysis_prompt(
    template: Template, text: str, options: AnalysisOptions
) -> str:
    prompt = template.substitute(entries=text)
    for line in optional_analysis_lines(options):
        prompt += "\n" + line
    return prompt + ANALYSIS_JSON_SHAPE


def build_gemini_prompt(text: str, options: AnalysisOptions) -> str:
    """Full structured-insight prompt. Options do not change it."""
    return GEMINI_TEMPLATE.substitute(entries=text)


def build_openai_prompt(text: str, options: AnalysisOptions) -> str:
    return _render_analysis_prompt(OPENAI_TEMPLATE, text, options)


def build_claude_prompt(text: str, options: AnalysisOptions) -> str:
    return _render_analysis_prompt(CLAUDE_TEMPLATE, text, options)


PROMPT_BUILDERS: dict[str, PromptBuilder] = {
    "gemini": build_gemini_prompt,
    "openai": build_openai_prompt,
    "claude": build_claude_prompt,
}
