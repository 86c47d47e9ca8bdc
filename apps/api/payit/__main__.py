"""
Run the service with uvicorn.

Usage:
    python -m payit

Configuration is loaded up front; an incomplete environment exits with status 1
before the server binds.
"""
from __future__ import annotations

import logging
import sys

import uvicorn

from payit.core.config import load_config
from payit.core.errors import ConfigurationError
from payit.main import create_app


def main() -> int:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        config = load_config()
    except ConfigurationError as e:
        logging.getLogger("payit").critical("failed to load configuration: %s", e)
        return 1

    logging.getLogger().setLevel(config.log_level.upper())
    app = create_app(config)
    logging.getLogger("payit").info(
        "Starting PayIt server on %s:%s", config.host, config.port
    )
    uvicorn.run(
        app,
        host=config.host,
        port=config.port,
        log_level=config.log_level.lower(),
        timeout_graceful_shutdown=5,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
