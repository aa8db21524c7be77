# journal_gateway/llm/providers/openai.py
from __future__ import annotations

from journal_gateway.llm.base import JSON, HttpProviderAdapter
from journal_gateway.llm.prompts import build_openai_prompt
from journal_gateway.models import AnalysisOptions

SYSTEM_PROMPT = (
    "You are a professional journal analyzer providing insights and analysis."
)


class OpenAIAdapter(HttpProviderAdapter):
    """Chat Completions API (api.openai.com/v1)."""

    fallback_error = "OpenAI API error"

    def build_prompt(self, text: str, options: AnalysisOptions) -> str:
        return build_openai_prompt(text, options)

    def build_request(
        self, prompt: str, options: AnalysisOptions
    ) -> tuple[str, dict[str, str], JSON]:
        payload: JSON = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            "max_tokens": self._max_tokens(),
            "temperature": self._temperature(options),
            "top_p": self._top_p(options),
        }
        headers = {"Authorization": f"Bearer {self.api_key}"}
        return ("/chat/completions", headers, payload)

    def parse_response(self, data: JSON) -> str:
        return data["choices"][0]["message"]["content"]
