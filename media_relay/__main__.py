"""
Entry point: ``python -m media_relay`` or the ``media-relay`` console script.

The environment is validated before anything is built; a missing variable
stops the process with exit status 1 and no socket is ever opened.
"""

import logging
import sys

import uvicorn

from media_relay.config import Config, validate_environment
from media_relay.config.logging_config import configure_logging
from media_relay.utils.exceptions import ConfigError

logger = logging.getLogger("media_relay")


def main() -> int:
    result = validate_environment()
    if not result.is_valid:
        logging.basicConfig(level=logging.ERROR, stream=sys.stderr)
        logger.error(f"FATAL ERROR: {result.describe()}")
        return 1

    try:
        config = Config.from_env()
    except ConfigError as e:
        logging.basicConfig(level=logging.ERROR, stream=sys.stderr)
        logger.error(f"FATAL ERROR: {e.error}" + (f" ({e.details})" if e.details else ""))
        return 1

    configure_logging(config)

    from media_relay.main import create_app, init_sentry

    init_sentry(config)
    app = create_app(config)

    logger.info(f"Server running on port {config.port}")
    uvicorn.run(app, host="0.0.0.0", port=config.port, log_config=None)
    return 0


if __name__ == "__main__":
    sys.exit(main())
