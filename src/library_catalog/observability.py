"""Logging and logfire tracing for the library catalog."""

import logging
import sys
from collections.abc import Generator
from contextlib import contextmanager
from typing import Any

import logfire

from .config import CatalogConfig, get_config

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

logger = logging.getLogger(__name__)

_tracing_enabled = False


def configure_logging(config: CatalogConfig | None = None) -> None:
    """Install a stderr handler on the package logger."""
    config = config or get_config()
    level = logging.DEBUG if config.debug else getattr(logging, config.log_level)

    package_logger = logging.getLogger("library_catalog")
    package_logger.setLevel(level)
    if not package_logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        package_logger.addHandler(handler)

    if config.echo_sql:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO)


def initialize_observability(config: CatalogConfig | None = None) -> None:
    """Configure logfire so spans are recorded for migrations and deletes."""
    global _tracing_enabled  # noqa: PLW0603
    config = config or get_config()

    if not config.enable_tracing:
        logger.debug("Tracing disabled via configuration")
        _tracing_enabled = False
        return

    logfire.configure(
        service_name="library-catalog",
        service_version=config.product_version,
        send_to_logfire="if-token-present",
        console=False,
    )
    _tracing_enabled = True
    logger.info("Tracing initialised")


def tracing_enabled() -> bool:
    return _tracing_enabled


@contextmanager
def traced(name: str, **attributes: Any) -> Generator[Any, None, None]:
    """Open a logfire span when tracing is initialised, otherwise do nothing."""
    if not _tracing_enabled:
        yield None
        return

    with logfire.span(name, **attributes) as span:
        yield span
