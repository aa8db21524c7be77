"""
Entry point: load configuration once and serve the gateway with uvicorn.
"""

import logging

import uvicorn

from journal_gateway.config import Configuration
from journal_gateway.server import create_app


def configure_logging(config: Configuration) -> None:
    log_conf = config.get_logging_config()
    logging.basicConfig(
        level=str(log_conf.get("level", "INFO")).upper(),
        format=log_conf.get(
            "format", "%(asctime)s - %(levelname)s - %(message)s"
        ),
    )


def main() -> None:
    """Main entry point - HTTP interface only."""
    config = Configuration()
    configure_logging(config)

    server_conf = config.get_server_config()
    host = server_conf.get("host", "localhost")
    port = int(server_conf.get("port", 8000))

    logging.info(f"Starting journal insight gateway on {host}:{port}")
    uvicorn.run(create_app(config), host=host, port=port, log_level="info")


if __name__ == "__main__":
    main()
