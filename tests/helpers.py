from types import SimpleNamespace

import httpx

from journal_gateway.http_resilience import HttpConfig, ResilientHttpClient
from journal_gateway.models import AnalysisResult

# No waiting between attempts in tests
FAST_HTTP = HttpConfig(initial_retry_delay=0, max_retry_delay=0, max_retries=1)


def mock_http(handler, base_url: str = "https://provider.test/v1") -> ResilientHttpClient:
    """ResilientHttpClient whose requests go to ``handler`` instead of the network."""
    return ResilientHttpClient(
        base_url, config=FAST_HTTP, transport=httpx.MockTransport(handler)
    )


def refuse_network(request: httpx.Request) -> httpx.Response:
    raise AssertionError(f"unexpected outbound call to {request.url}")


class FakeGenAIClient:
    """Stands in for ``genai.Client``: scripted replies, records calls."""

    def __init__(self, *replies):
        self.replies = list(replies)
        self.calls: list[dict] = []
        self.closed = False
        self.aio = SimpleNamespace(
            models=SimpleNamespace(generate_content=self._generate),
            aclose=self._aclose,
        )

    async def _generate(self, **kwargs):
        self.calls.append(kwargs)
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return SimpleNamespace(text=reply)

    async def _aclose(self):
        self.closed = True


class RecordingAdapter:
    """Adapter double that records every invoke and returns a fixed reply."""

    def __init__(self, model_id: str, reply: str = "ok", error: str | None = None):
        self.model_id = model_id
        self.reply = reply
        self.error = error
        self.calls: list[tuple] = []
        self.closed = False

    async def invoke(self, text, options):
        self.calls.append((text, options))
        if self.error:
            return AnalysisResult.failure(self.model_id, self.error)
        return AnalysisResult(text=self.reply, model_id=self.model_id)

    async def close(self):
        self.closed = True
