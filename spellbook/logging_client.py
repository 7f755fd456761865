"""
Logging setup for the Spellbook backend.

Configures the `spellbook` package logger, so every `spellbook.*` module
logger inherits its handlers. Console output is always on; with
LOGGING_HOST set, records also go to the central logging service over a
socket.
"""
import logging
import logging.handlers
from typing import Optional

from spellbook.config import settings

CONSOLE_FORMAT = '%(asctime)s - [%(service)s] - %(levelname)s - %(name)s - %(message)s'


class ServiceNameFilter(logging.Filter):
    """Stamps `record.service` for the formatter and the log service."""

    def __init__(self, service_name: str):
        super().__init__()
        self.service_name = service_name

    def filter(self, record: logging.LogRecord) -> bool:
        record.service = self.service_name
        return True


def silence_noisy_loggers(names: str) -> None:
    """Raise comma-separated third-party loggers to WARNING."""
    for name in filter(None, (n.strip() for n in names.split(','))):
        logging.getLogger(name).setLevel(logging.WARNING)


def setup_logger(
    service_name: str,
    log_host: Optional[str] = None,
    log_port: Optional[int] = None,
) -> logging.Logger:
    """
    Configure and return the service logger.

    Calling it again replaces the handlers instead of stacking them.
    """
    log_host = log_host or settings.LOGGING_HOST
    log_port = log_port or settings.LOGGING_PORT

    logger = logging.getLogger(service_name)
    logger.setLevel(settings.LOG_LEVEL)
    logger.handlers = []

    service_filter = ServiceNameFilter(service_name)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    console_handler.addFilter(service_filter)
    logger.addHandler(console_handler)

    if log_host:
        socket_handler = logging.handlers.SocketHandler(log_host, log_port)
        socket_handler.addFilter(service_filter)
        logger.addHandler(socket_handler)

    silence_noisy_loggers(settings.NOISY_LOGGERS)
    return logger
