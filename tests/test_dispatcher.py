import json

import pytest

from journal_gateway.dispatcher import AnalysisDispatcher
from journal_gateway.llm.providers import GeminiAdapter, OpenAIAdapter
from journal_gateway.llm.registry import BUILTIN_PROVIDERS, ProviderRegistry
from tests.helpers import FAST_HTTP, FakeGenAIClient, RecordingAdapter, mock_http, refuse_network


@pytest.fixture
def fakes():
    return {
        provider_id: RecordingAdapter(cfg.model_id, reply=f"from {provider_id}")
        for provider_id, cfg in BUILTIN_PROVIDERS.items()
    }


@pytest.fixture
def dispatcher(fakes):
    return AnalysisDispatcher(ProviderRegistry(), fakes, default_provider="gemini")


def _total_calls(fakes):
    return sum(len(adapter.calls) for adapter in fakes.values())


@pytest.mark.asyncio
@pytest.mark.parametrize("provider_id", ["gemini", "openai", "claude"])
async def test_dispatch_invokes_only_matching_adapter(dispatcher, fakes, provider_id):
    response = await dispatcher.dispatch({"prompt": "hello", "provider": provider_id})

    assert response.status_code == 200
    assert response.body == {
        "text": f"from {provider_id}",
        "model": BUILTIN_PROVIDERS[provider_id].model_id,
    }
    for name, adapter in fakes.items():
        assert len(adapter.calls) == (1 if name == provider_id else 0)


@pytest.mark.asyncio
async def test_default_provider_used_when_absent(dispatcher, fakes):
    response = await dispatcher.dispatch({"prompt": "hello"})
    assert response.status_code == 200
    assert len(fakes["gemini"].calls) == 1


@pytest.mark.asyncio
@pytest.mark.parametrize("payload", [{"prompt": ""}, {}, {"prompt": None, "provider": "openai"}])
async def test_missing_prompt_is_rejected(dispatcher, fakes, payload):
    response = await dispatcher.dispatch(payload)
    assert response.status_code == 400
    assert response.body == {"error": "Prompt is required"}
    assert _total_calls(fakes) == 0


@pytest.mark.asyncio
async def test_empty_prompt_checked_before_provider(dispatcher, fakes):
    response = await dispatcher.dispatch({"prompt": "", "provider": "unknown"})
    assert response.body == {"error": "Prompt is required"}


@pytest.mark.asyncio
async def test_unknown_provider_is_rejected(dispatcher, fakes):
    response = await dispatcher.dispatch({"prompt": "x", "provider": "unknown"})
    assert response.status_code == 400
    assert response.body == {"error": "Invalid LLM provider"}
    assert _total_calls(fakes) == 0


@pytest.mark.asyncio
async def test_no_default_and_no_provider_is_rejected(fakes):
    dispatcher = AnalysisDispatcher(ProviderRegistry(), fakes, default_provider=None)
    response = await dispatcher.dispatch({"prompt": "x"})
    assert response.status_code == 400
    assert response.body == {"error": "Invalid LLM provider"}


@pytest.mark.asyncio
async def test_inline_adapter_error_keeps_200(fakes):
    fakes["claude"] = RecordingAdapter(
        "claude-3-haiku-20240307", error="Claude API error"
    )
    dispatcher = AnalysisDispatcher(ProviderRegistry(), fakes, "gemini")

    response = await dispatcher.dispatch({"prompt": "x", "provider": "claude"})

    assert response.status_code == 200
    assert response.body == {
        "text": "",
        "model": "claude-3-haiku-20240307",
        "error": "Claude API error",
    }


@pytest.mark.asyncio
async def test_unexpected_exception_is_500(fakes):
    class Exploding(RecordingAdapter):
        async def invoke(self, text, options):
            raise RuntimeError("kaboom")

    fakes["openai"] = Exploding("gpt-3.5-turbo")
    dispatcher = AnalysisDispatcher(ProviderRegistry(), fakes, "gemini")

    response = await dispatcher.dispatch({"prompt": "x", "provider": "openai"})

    assert response.status_code == 500
    assert response.body == {"error": "Failed to process request", "details": "kaboom"}


@pytest.mark.asyncio
async def test_bad_json_and_bad_options_are_500(dispatcher, fakes):
    response = await dispatcher.handle(b"{not json")
    assert response.status_code == 500
    assert response.body["error"] == "Failed to process request"
    assert response.body["details"]

    response = await dispatcher.dispatch(
        {"prompt": "x", "options": {"temperature": "warm"}}
    )
    assert response.status_code == 500
    assert _total_calls(fakes) == 0


@pytest.mark.asyncio
async def test_options_reach_the_adapter(dispatcher, fakes):
    await dispatcher.handle(
        json.dumps(
            {"prompt": "x", "provider": "claude", "options": {"includeGoals": True, "temperature": 0.2}}
        )
    )
    (_, options), = fakes["claude"].calls
    assert options.include_goals is True
    assert options.temperature == 0.2
    assert options.include_word_cloud is False


@pytest.mark.asyncio
async def test_close_closes_every_adapter(dispatcher, fakes):
    await dispatcher.close()
    assert all(adapter.closed for adapter in fakes.values())


# ---------- end-to-end scenarios with real adapters ----------

@pytest.mark.asyncio
async def test_gemini_scenario_with_stub_client():
    adapters = {
        "gemini": GeminiAdapter(
            BUILTIN_PROVIDERS["gemini"], "g-key", FAST_HTTP, client=FakeGenAIClient("ok")
        )
    }
    dispatcher = AnalysisDispatcher(ProviderRegistry(), adapters, "gemini")

    response = await dispatcher.dispatch({"prompt": "Today was good", "provider": "gemini"})

    assert response.status_code == 200
    assert response.body == {"text": "ok", "model": "gemini-2.0-flash"}


@pytest.mark.asyncio
async def test_openai_scenario_without_credential():
    adapters = {
        "openai": OpenAIAdapter(
            BUILTIN_PROVIDERS["openai"], None, FAST_HTTP, http=mock_http(refuse_network)
        )
    }
    dispatcher = AnalysisDispatcher(ProviderRegistry(), adapters, "gemini")

    response = await dispatcher.dispatch({"prompt": "x", "provider": "openai"})

    assert response.status_code == 200
    assert response.body == {
        "text": "",
        "model": "gpt-3.5-turbo",
        "error": "OPENAI_API_KEY is not defined in environment variables",
    }


@pytest.mark.asyncio
async def test_identical_requests_give_identical_results():
    client = FakeGenAIClient("same", "same")
    adapters = {
        "gemini": GeminiAdapter(BUILTIN_PROVIDERS["gemini"], "g-key", FAST_HTTP, client=client)
    }
    dispatcher = AnalysisDispatcher(ProviderRegistry(), adapters, "gemini")
    payload = {"prompt": "Same day", "options": {"temperature": 0}}

    first = await dispatcher.dispatch(payload)
    second = await dispatcher.dispatch(payload)

    assert first == second
    assert client.calls[0]["contents"] == client.calls[1]["contents"]


@pytest.mark.asyncio
@pytest.mark.parametrize("provider", ["", None, {"name": "gemini"}, ["gemini"], 7])
async def test_explicit_bad_provider_is_rejected(dispatcher, fakes, provider):
    response = await dispatcher.dispatch({"prompt": "x", "provider": provider})

    assert response.status_code == 400
    assert response.body == {"error": "Invalid LLM provider"}
    assert _total_calls(fakes) == 0
