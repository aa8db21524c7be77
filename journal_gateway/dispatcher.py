"""
Request dispatcher for the journal insight gateway.

Turns one inbound body into one ``(status, payload)`` pair:

- 400 when the prompt is missing or the provider is unknown; no adapter
  is contacted
- 200 with the adapter's ``AnalysisResult``, including results that carry
  an inline ``error`` (missing credential, upstream failure)
- 500 for anything unexpected
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from journal_gateway.llm.base import ProviderAdapter
from journal_gateway.llm.registry import ProviderRegistry, UnknownProviderError
from journal_gateway.models import AnalysisOptions, AnalysisRequest

logger = logging.getLogger(__name__)

PROMPT_REQUIRED = "Prompt is required"
INVALID_PROVIDER = "Invalid LLM provider"
PROCESSING_FAILED = "Failed to process request"


class InvalidRequestError(ValueError):
    """The inbound body is missing required input."""


@dataclass(frozen=True, slots=True)
class DispatchResponse:
    status_code: int
    body: dict[str, Any]


class AnalysisDispatcher:
    def __init__(
        self,
        registry: ProviderRegistry,
        adapters: Mapping[str, ProviderAdapter],
        default_provider: str | None = None,
    ):
        self.registry = registry
        self.adapters = dict(adapters)
        self.default_provider = default_provider

    def parse_request(self, payload: Any) -> AnalysisRequest:
        """Validate the wire body ``{prompt, provider?, options?}``.

        Raises:
            InvalidRequestError: prompt missing or empty.
            UnknownProviderError: provider not registered.
        """
        if not isinstance(payload, dict):
            raise TypeError(f"Expected a JSON object, got {type(payload).__name__}")

        text = payload.get("prompt")
        if not text:
            raise InvalidRequestError(PROMPT_REQUIRED)
        if not isinstance(text, str):
            raise TypeError("prompt must be a string")

        provider_id = payload.get("provider", self.default_provider)
        self.registry.lookup(provider_id)

        options = AnalysisOptions.model_validate(payload.get("options") or {})
        return AnalysisRequest(text=text, provider_id=provider_id, options=options)

    async def dispatch(self, payload: Any) -> DispatchResponse:
        try:
            request = self.parse_request(payload)
        except InvalidRequestError:
            return DispatchResponse(400, {"error": PROMPT_REQUIRED})
        except UnknownProviderError as e:
            logger.info(f"Rejected request for provider {e.provider_id!r}")
            return DispatchResponse(400, {"error": INVALID_PROVIDER})
        except Exception as e:
            return self._failure(e)

        try:
            adapter = self.adapters[request.provider_id]
            result = await adapter.invoke(request.text, request.options)
        except Exception as e:
            return self._failure(e)

        if not result.ok:
            logger.warning(
                f"{request.provider_id} returned inline error: {result.error}"
            )
        return DispatchResponse(200, result.to_payload())

    async def handle(self, raw_body: bytes | str) -> DispatchResponse:
        """Decode a raw JSON body and dispatch it."""
        try:
            payload = json.loads(raw_body)
        except ValueError as e:
            return self._failure(e)
        return await self.dispatch(payload)

    async def close(self) -> None:
        for adapter in self.adapters.values():
            await adapter.close()

    @staticmethod
    def _failure(error: Exception) -> DispatchResponse:
        logger.exception(f"LLM API error: {error}")
        return DispatchResponse(
            500, {"error": PROCESSING_FAILED, "details": str(error)}
        )
