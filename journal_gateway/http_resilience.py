"""
HTTP resilience for outbound provider calls.

Every provider call gets:
- a bounded timeout
- a small number of retries (one by default) for rate limiting, 5xx,
  connect errors and timeouts
- exponential backoff with jitter between attempts

``retry_async`` is transport-agnostic so SDK-based adapters (Gemini) share
the same policy as the plain httpx ones.
"""

from __future__ import annotations

import asyncio
import logging
import random
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

import httpx
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

T = TypeVar("T")

RETRYABLE_STATUS_CODES = frozenset({429, 500, 502, 503, 504})


class HttpConfig(BaseModel):
    """Timeout, retry and connection-pool settings for provider calls."""

    # Retry configuration
    max_retries: int = Field(default=1, ge=0)
    initial_retry_delay: float = Field(default=0.5, ge=0)
    max_retry_delay: float = Field(default=4.0, ge=0)
    retry_multiplier: float = Field(default=2.0, ge=1)
    retry_jitter: float = Field(default=0.1, ge=0, le=1)

    # Connection configuration
    timeout: float = Field(default=30.0, gt=0)
    max_keepalive_connections: int = 10
    max_connections: int = 50
    keepalive_expiry: float = 30.0


def backoff_delay(config: HttpConfig, attempt: int) -> float:
    """Seconds to wait before ``attempt`` (0 is the first try, no wait)."""
    if attempt <= 0:
        return 0.0
    delay = min(
        config.initial_retry_delay * config.retry_multiplier ** (attempt - 1),
        config.max_retry_delay,
    )
    spread = delay * config.retry_jitter
    return max(0.0, delay + random.uniform(-spread, spread))


def is_retryable(error: BaseException) -> bool:
    """Rate limits, server errors, connect failures and timeouts."""
    if isinstance(error, httpx.HTTPStatusError):
        return error.response.status_code in RETRYABLE_STATUS_CODES
    return isinstance(error, httpx.ConnectError | httpx.TimeoutException)


async def retry_async(
    call: Callable[[], Awaitable[T]],
    config: HttpConfig,
    should_retry: Callable[[BaseException], bool] = is_retryable,
    label: str = "request",
) -> T:
    """Await ``call()`` and retry it per ``config`` while ``should_retry`` allows.

    The last error is re-raised once attempts run out or the error is not
    retryable.
    """
    attempts = config.max_retries + 1
    for attempt in range(attempts):
        delay = backoff_delay(config, attempt)
        if delay:
            logger.debug(f"Retrying {label} in {delay:.2f}s (attempt {attempt})")
            await asyncio.sleep(delay)
        try:
            return await call()
        except Exception as e:
            if attempt == attempts - 1 or not should_retry(e):
                raise
            logger.warning(f"{label} failed (attempt {attempt + 1}/{attempts}): {e}")
    raise AssertionError("unreachable")


class ResilientHttpClient:
    """
    Pooled ``httpx.AsyncClient`` wrapper that applies ``HttpConfig``.

    Non-2xx responses surface as ``httpx.HTTPStatusError`` so callers can
    read the provider's error body from ``error.response``.
    """

    def __init__(
        self,
        base_url: str,
        headers: dict[str, str] | None = None,
        config: HttpConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.config = config or HttpConfig()
        self.http = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=httpx.Timeout(self.config.timeout),
            headers=headers or {},
            limits=httpx.Limits(
                max_keepalive_connections=self.config.max_keepalive_connections,
                max_connections=self.config.max_connections,
                keepalive_expiry=self.config.keepalive_expiry,
            ),
            transport=transport,
        )

    async def request_with_retry(
        self, method: str, url: str, **kwargs: Any
    ) -> httpx.Response:
        async def send() -> httpx.Response:
            response = await self.http.request(method, url, **kwargs)
            response.raise_for_status()
            return response

        return await retry_async(send, self.config, label=f"{method} {url}")

    async def post_json(
        self,
        url: str,
        payload: dict[str, Any],
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        return await self.request_with_retry("POST", url, json=payload, headers=headers)

    async def close(self) -> None:
        await self.http.aclose()

    async def __aenter__(self) -> ResilientHttpClient:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()


def create_http_config_from_dict(config_dict: dict[str, Any]) -> HttpConfig:
    """Build ``HttpConfig`` from the ``http`` section of a YAML config dict.

    Missing keys keep the model defaults; bad values raise
    ``pydantic.ValidationError``.
    """
    return HttpConfig.model_validate(config_dict.get("http") or {})
