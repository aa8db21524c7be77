# journal_gateway/llm/providers/gemini.py
from __future__ import annotations

import logging

import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types as genai_types

from journal_gateway.http_resilience import (
    RETRYABLE_STATUS_CODES,
    HttpConfig,
    is_retryable,
    retry_async,
)
from journal_gateway.llm.base import (
    ProviderAdapter,
    ProviderConfig,
    UpstreamError,
    reply_text,
)
from journal_gateway.llm.prompts import build_gemini_prompt
from journal_gateway.models import AnalysisOptions

logger = logging.getLogger(__name__)


def _should_retry(error: BaseException) -> bool:
    if isinstance(error, genai_errors.APIError):
        return error.code in RETRYABLE_STATUS_CODES
    return is_retryable(error)


class GeminiAdapter(ProviderAdapter):
    """
    Gemini through the google-genai SDK.

    The SDK client is created on first use so a missing key never reaches
    ``genai.Client`` (which would raise at construction).
    """

    def __init__(
        self,
        cfg: ProviderConfig,
        api_key: str | None,
        http_config: HttpConfig | None = None,
        client: genai.Client | None = None,
    ):
        super().__init__(cfg, api_key, http_config)
        self._client = client

    def _genai_client(self) -> genai.Client:
        if self._client is None:
            self._client = genai.Client(
                api_key=self.api_key,
                http_options=genai_types.HttpOptions(
                    timeout=int(self.http_config.timeout * 1000)
                ),
            )
        return self._client

    def build_prompt(self, text: str, options: AnalysisOptions) -> str:
        return build_gemini_prompt(text, options)

    def generation_config(
        self, options: AnalysisOptions
    ) -> genai_types.GenerateContentConfig:
        return genai_types.GenerateContentConfig(
            max_output_tokens=self._max_tokens(),
            temperature=self._temperature(options),
            top_p=self._top_p(options),
            top_k=self._top_k(options),
        )

    async def complete(self, prompt: str, options: AnalysisOptions) -> str:
        client = self._genai_client()
        config = self.generation_config(options)

        async def generate() -> genai_types.GenerateContentResponse:
            return await client.aio.models.generate_content(
                model=self.model, contents=prompt, config=config
            )

        try:
            response = await retry_async(
                generate, self.http_config, _should_retry, label="Gemini request"
            )
        except genai_errors.APIError as e:
            raise UpstreamError(e.message or "Gemini API error") from e
        except httpx.HTTPError as e:
            raise UpstreamError(str(e) or type(e).__name__) from e

        logger.debug(f"gemini raw response: {response}")
        return reply_text(response.text)

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aio.aclose()
            self._client = None
