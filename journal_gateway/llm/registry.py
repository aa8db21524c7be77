# journal_gateway/llm/registry.py
from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from journal_gateway.config import CREDENTIAL_ENV
from journal_gateway.llm.base import ProviderAdapter, ProviderConfig
from journal_gateway.llm.providers import ADAPTERS

if TYPE_CHECKING:
    from journal_gateway.config import Configuration

logger = logging.getLogger(__name__)

BUILTIN_PROVIDERS: dict[str, ProviderConfig] = {
    "gemini": ProviderConfig(
        provider_id="gemini",
        model_id="gemini-2.0-flash",
        max_output_tokens=8192,
        credential_env=CREDENTIAL_ENV["gemini"],
    ),
    "openai": ProviderConfig(
        provider_id="openai",
        model_id="gpt-3.5-turbo",
        max_output_tokens=4096,
        credential_env=CREDENTIAL_ENV["openai"],
        base_url="https://api.openai.com/v1",
    ),
    "claude": ProviderConfig(
        provider_id="claude",
        model_id="claude-3-haiku-20240307",
        max_output_tokens=4096,
        credential_env=CREDENTIAL_ENV["claude"],
        base_url="https://api.anthropic.com/v1",
    ),
}

# YAML key -> ProviderConfig field
_OVERRIDE_FIELDS = {
    "model": "model_id",
    "max_tokens": "max_output_tokens",
    "base_url": "base_url",
    "temperature": "temperature",
    "top_p": "top_p",
    "top_k": "top_k",
}


class UnknownProviderError(LookupError):
    """The requested provider id is not registered."""

    def __init__(self, provider_id: object):
        super().__init__(f"Unknown LLM provider: {provider_id!r}")
        self.provider_id = provider_id


class ProviderRegistry:
    """Fixed provider id → ``ProviderConfig`` table."""

    def __init__(self, providers: Mapping[str, ProviderConfig] | None = None):
        self._providers = dict(BUILTIN_PROVIDERS if providers is None else providers)

    @classmethod
    def from_overrides(
        cls, overrides: Mapping[str, Mapping[str, Any]]
    ) -> ProviderRegistry:
        """Built-in providers with YAML ``llm.providers`` values applied.

        Sections for providers without an adapter are ignored.
        """
        providers = dict(BUILTIN_PROVIDERS)
        for provider_id, section in overrides.items():
            if provider_id not in providers:
                logger.warning(f"Ignoring config for unsupported provider '{provider_id}'")
                continue
            update = {
                field: section[key]
                for key, field in _OVERRIDE_FIELDS.items()
                if section and key in section
            }
            providers[provider_id] = ProviderConfig.model_validate(
                {**providers[provider_id].model_dump(), **update}
            )
        return cls(providers)

    def lookup(self, provider_id: object) -> ProviderConfig:
        if not isinstance(provider_id, str) or provider_id not in self._providers:
            raise UnknownProviderError(provider_id)
        return self._providers[provider_id]

    def __contains__(self, provider_id: object) -> bool:
        return isinstance(provider_id, str) and provider_id in self._providers

    @property
    def provider_ids(self) -> list[str]:
        return list(self._providers)

    def build_adapters(self, config: Configuration) -> dict[str, ProviderAdapter]:
        """One adapter per registered provider, credentials taken from ``config``."""
        http_config = config.get_http_config()
        adapters: dict[str, ProviderAdapter] = {}
        for provider_id, cfg in self._providers.items():
            adapter_cls = ADAPTERS[provider_id]
            adapters[provider_id] = adapter_cls(
                cfg, config.api_key(provider_id), http_config
            )
            if not config.api_key(provider_id):
                logger.warning(
                    f"{cfg.credential_env} is not set; '{provider_id}' requests "
                    "will report an error"
                )
        return adapters
