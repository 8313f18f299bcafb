"""
Logging configuration.

Console logging for every environment: a readable single-line format in
development, structured JSON lines everywhere else so the hosting platform's
log explorer can index the fields.
"""

import json
import logging
import sys

from media_relay.config.config import Config

logger = logging.getLogger(__name__)

NOISY_LOGGERS = ("httpx", "httpcore", "hpack", "urllib3", "stripe", "google_genai")


class RequestContextFilter(logging.Filter):
    """
    Copies the request id set by RequestIDMiddleware onto every log record.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        from media_relay.middleware.request_id_middleware import current_request_id

        request_id = current_request_id.get()
        if request_id:
            record.request_id = request_id
        return True


class StructuredFormatter(logging.Formatter):
    """
    JSON formatter for structured logging.

    Formats log records as JSON with request context and additional metadata.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "severity": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if hasattr(record, "request_id"):
            log_data["request_id"] = record.request_id

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        if hasattr(record, "extra"):
            log_data.update(record.extra)

        return json.dumps(log_data, default=str)


def configure_logging(config: Config) -> None:
    """
    Configure the root logger for the relay.

    Sets up:
    - Console handler on stdout
    - Request id filter for log-to-request correlation
    - Plain format in development, JSON otherwise
    """
    level = logging.getLevelName(config.log_level)
    if not isinstance(level, int):
        level = logging.INFO

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.addFilter(RequestContextFilter())

    if config.is_development:
        console_handler.setFormatter(
            logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        )
    else:
        console_handler.setFormatter(StructuredFormatter())

    root_logger.addHandler(console_handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logger.info(f"Logging configured (env={config.app_env}, level={logging.getLevelName(level)})")
