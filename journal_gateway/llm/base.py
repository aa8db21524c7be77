# journal_gateway/llm/base.py
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any

import httpx
from pydantic import BaseModel, ConfigDict

from journal_gateway.http_resilience import HttpConfig, ResilientHttpClient
from journal_gateway.models import AnalysisOptions, AnalysisResult

logger = logging.getLogger(__name__)

JSON = dict[str, Any]


class ProviderConfig(BaseModel):
    """Static settings for one provider, fixed at startup."""

    model_config = ConfigDict(frozen=True, protected_namespaces=())

    provider_id: str
    model_id: str
    max_output_tokens: int
    credential_env: str
    base_url: str | None = None
    temperature: float = 0.7
    top_p: float = 0.95
    top_k: int = 40


class UpstreamError(Exception):
    """A provider call failed; the message is reported back to the caller."""


def reply_text(value: Any) -> str:
    """Reply text from a provider envelope; a missing payload counts as empty."""
    if value is None:
        return ""
    if not isinstance(value, str):
        raise UpstreamError(
            f"Unexpected response format: expected text, got {type(value).__name__}"
        )
    return value


class ProviderAdapter(ABC):
    """
    Strategy interface for each provider.
    ``invoke`` renders the prompt, calls the provider once and always
    returns an ``AnalysisResult``; provider failures never escape as
    exceptions.
    """

    def __init__(
        self,
        cfg: ProviderConfig,
        api_key: str | None,
        http_config: HttpConfig | None = None,
    ):
        self.cfg = cfg
        self.api_key = api_key
        self.http_config = http_config or HttpConfig()

    # ---------- helpers ----------
    @property
    def model(self) -> str:
        return self.cfg.model_id

    def _temperature(self, options: AnalysisOptions) -> float:
        if options.temperature is None:
            return self.cfg.temperature
        return options.temperature

    def _top_p(self, options: AnalysisOptions) -> float:
        return self.cfg.top_p if options.top_p is None else options.top_p

    def _top_k(self, options: AnalysisOptions) -> int:
        return self.cfg.top_k if options.top_k is None else options.top_k

    def _max_tokens(self) -> int:
        return self.cfg.max_output_tokens

    # ---------- interface ----------
    @abstractmethod
    def build_prompt(self, text: str, options: AnalysisOptions) -> str:
        ...

    @abstractmethod
    async def complete(self, prompt: str, options: AnalysisOptions) -> str:
        """Send one prompt and return the reply text; raise ``UpstreamError``."""
        ...

    async def invoke(self, text: str, options: AnalysisOptions) -> AnalysisResult:
        if not self.api_key:
            return AnalysisResult.failure(
                self.model,
                f"{self.cfg.credential_env} is not defined in environment variables",
            )

        prompt = self.build_prompt(text, options)
        try:
            reply = await self.complete(prompt, options)
        except UpstreamError as e:
            logger.error(f"{self.cfg.provider_id} API error: {e}")
            return AnalysisResult.failure(self.model, str(e))

        return AnalysisResult(text=reply, model_id=self.model)

    async def close(self) -> None:
        """Release network resources held by the adapter."""


class HttpProviderAdapter(ProviderAdapter):
    """
    Base for providers reached with plain JSON over HTTPS.
    Subclasses describe the request and how to read the reply envelope.
    """

    fallback_error = "API error"

    def __init__(
        self,
        cfg: ProviderConfig,
        api_key: str | None,
        http_config: HttpConfig | None = None,
        http: ResilientHttpClient | None = None,
    ):
        super().__init__(cfg, api_key, http_config)
        if http is None:
            if not cfg.base_url:
                raise ValueError(f"Provider '{cfg.provider_id}' has no base_url")
            http = ResilientHttpClient(cfg.base_url, config=self.http_config)
        self.http = http

    @abstractmethod
    def build_request(
        self, prompt: str, options: AnalysisOptions
    ) -> tuple[str, dict[str, str], JSON]:
        """
        → (path, headers, json_payload)
        """
        ...

    @abstractmethod
    def parse_response(self, data: JSON) -> str:
        """Pull the single reply text out of the provider envelope."""
        ...

    def error_message(self, response: httpx.Response) -> str:
        """Provider-reported ``error.message`` or ``fallback_error``."""
        try:
            body = response.json()
        except ValueError:
            return self.fallback_error
        error = body.get("error") if isinstance(body, dict) else None
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        return self.fallback_error

    async def complete(self, prompt: str, options: AnalysisOptions) -> str:
        path, headers, payload = self.build_request(prompt, options)
        try:
            response = await self.http.post_json(path, payload, headers=headers)
        except httpx.HTTPStatusError as e:
            raise UpstreamError(self.error_message(e.response)) from e
        except httpx.HTTPError as e:
            raise UpstreamError(str(e) or type(e).__name__) from e

        try:
            data = response.json()
            logger.debug(f"{self.cfg.provider_id} raw response: {data}")
            reply = self.parse_response(data)
        except (ValueError, KeyError, IndexError, TypeError, AttributeError) as e:
            raise UpstreamError(f"Unexpected response format: {e!s}") from e
        return reply_text(reply)

    async def close(self) -> None:
        await self.http.close()
