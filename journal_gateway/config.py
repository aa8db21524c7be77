"""Configuration management for the journal insight gateway."""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Any

import yaml
from dotenv import load_dotenv

from journal_gateway.http_resilience import HttpConfig, create_http_config_from_dict

DEFAULT_CONFIG_PATH = os.path.join(os.path.dirname(__file__), "config.yaml")

# Provider id -> environment variable holding its API key
CREDENTIAL_ENV = {
    "gemini": "GEMINI_API_KEY",
    "openai": "OPENAI_API_KEY",
    "claude": "ANTHROPIC_API_KEY",
}


class Configuration:
    """Snapshot of YAML settings and provider credentials.

    Built once at startup and handed to the registry, the adapters and the
    server. Nothing reads ``os.environ`` after construction.
    """

    def __init__(
        self,
        config_path: str | None = None,
        env: Mapping[str, str] | None = None,
    ) -> None:
        """Load settings from YAML and the environment.

        Args:
            config_path: YAML file to read; the packaged ``config.yaml`` by default.
            env: Environment mapping to use instead of ``os.environ``. When
                given, ``.env`` is not loaded.
        """
        if env is None:
            self.load_env()
            env = os.environ
        self._env = dict(env)
        self._config = self._load_yaml_config(config_path or DEFAULT_CONFIG_PATH)

    @staticmethod
    def load_env() -> None:
        """Load environment variables from a .env file, if present."""
        load_dotenv()

    @staticmethod
    def _load_yaml_config(config_path: str) -> dict[str, Any]:
        with open(config_path, encoding="utf-8") as file:
            return yaml.safe_load(file) or {}

    @property
    def default_provider(self) -> str | None:
        """Provider used when a request names none.

        ``DEFAULT_LLM_PROVIDER`` wins over ``llm.default`` in the YAML file.
        """
        env_default = self._env.get("DEFAULT_LLM_PROVIDER")
        if env_default:
            return env_default
        return self._config.get("llm", {}).get("default")

    def api_key(self, provider_id: str) -> str | None:
        """Return the credential for ``provider_id``, or None when unset."""
        env_key = CREDENTIAL_ENV.get(provider_id)
        if not env_key:
            return None
        return self._env.get(env_key) or None

    def get_config_dict(self) -> dict[str, Any]:
        return self._config

    def get_provider_overrides(self) -> dict[str, dict[str, Any]]:
        """Per-provider settings from ``llm.providers``."""
        return self._config.get("llm", {}).get("providers") or {}

    def get_http_config(self) -> HttpConfig:
        return create_http_config_from_dict(self._config)

    def get_server_config(self) -> dict[str, Any]:
        return self._config.get("server", {})

    def get_logging_config(self) -> dict[str, Any]:
        return self._config.get("logging", {})
