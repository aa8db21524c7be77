# journal_gateway/llm/providers/anthropic.py
from __future__ import annotations

from journal_gateway.llm.base import JSON, HttpProviderAdapter
from journal_gateway.llm.prompts import build_claude_prompt
from journal_gateway.models import AnalysisOptions

ANTHROPIC_VERSION = "2023-06-01"


class AnthropicAdapter(HttpProviderAdapter):
    """Messages API (api.anthropic.com/v1) for the ``claude`` provider."""

    fallback_error = "Claude API error"

    def build_prompt(self, text: str, options: AnalysisOptions) -> str:
        return build_claude_prompt(text, options)

    def build_request(
        self, prompt: str, options: AnalysisOptions
    ) -> tuple[str, dict[str, str], JSON]:
        payload: JSON = {
            "model": self.model,
            "messages": [{"role": "user", "content": prompt}],
            "max_tokens": self._max_tokens(),
            "temperature": self._temperature(options),
        }
        # top_p only when the caller set it
        if options.top_p is not None:
            payload["top_p"] = options.top_p

        headers = {
            "x-api-key": self.api_key or "",
            "anthropic-version": ANTHROPIC_VERSION,
            "content-type": "application/json",
        }
        return ("/messages", headers, payload)

    def parse_response(self, data: JSON) -> str:
        content = data.get("content") or []
        if not content:
            return ""
        return content[0].get("text") or ""
