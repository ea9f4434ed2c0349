import logging

from anystore.functools import weakref_cache as cache
from anystore.logging import configure_logging, get_logger

from xpath_reader.context import Context, load_context
from xpath_reader.settings import Settings

log = get_logger(__name__)


@cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


@cache
def _get_configured_context() -> Context:
    settings = get_settings()
    if settings.context_path is None:
        return Context()
    return load_context(settings.context_path)


def get_default_context() -> Context:
    """Get a fresh copy of the context configured in settings.

    Readers built without an explicit context use this one. Each call
    returns a new copy so that no reader shares mutable state with another.
    """
    return _get_configured_context().copy()


def init_xpath_reader() -> None:
    """Initialize xpath-reader logging."""
    settings = get_settings()
    if settings.debug:
        configure_logging(level=logging.DEBUG)
    else:
        configure_logging(level=logging.INFO)
    log.debug("Initialized", context_path=str(settings.context_path))
