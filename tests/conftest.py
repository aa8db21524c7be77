import textwrap

import pytest

from journal_gateway.config import Configuration

CONFIG_YAML = textwrap.dedent(
    """
    llm:
      default: gemini
      providers:
        openai:
          base_url: https://api.openai.test/v1
        claude:
          model: claude-3-haiku-20240307
          base_url: https://api.anthropic.test/v1
    http:
      timeout: 5.0
      max_retries: 1
      initial_retry_delay: 0
      max_retry_delay: 0
    server:
      host: 127.0.0.1
      port: 9001
    logging:
      level: DEBUG
    """
)


@pytest.fixture
def config_path(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(CONFIG_YAML, encoding="utf-8")
    return str(path)


@pytest.fixture
def make_config(config_path):
    def _make(**env: str) -> Configuration:
        return Configuration(config_path=config_path, env=env)

    return _make
