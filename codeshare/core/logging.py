"""structlog setup: console output in debug, JSON lines otherwise."""

import logging
import sys

import structlog

from codeshare.core.config import get_settings

# Event keys whose values must never reach a log sink
SECRET_KEYS = frozenset(
    {"password", "access_token", "refresh_token", "token", "authorization", "code"}
)

# Loggers that would otherwise echo request URLs (OAuth codes, tokens) at INFO
_NOISY_LOGGERS = ("httpx", "httpcore")

_configured = False


def redact_secrets(logger, method_name: str, event_dict: dict) -> dict:
    for key in SECRET_KEYS.intersection(event_dict):
        event_dict[key] = "***"
    return event_dict


def configure_logging(force: bool = False) -> None:
    """Install the structlog pipeline. Idempotent unless *force* is set."""
    global _configured
    if _configured and not force:
        return

    settings = get_settings()
    level = logging.getLevelName(settings.log_level)

    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        redact_secrets,
        structlog.processors.TimeStamper(fmt="iso"),
    ]
    if settings.app_debug:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()))
    else:
        processors += [structlog.processors.dict_tracebacks, structlog.processors.JSONRenderer()]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        # add_logger_name needs stdlib loggers
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level, force=force)
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    _configured = True


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    configure_logging()
    return structlog.get_logger(name)
