"""structlog setup for dynidp.

Events are key=value; provider secrets and challenge state never reach the
output, whatever key a caller logs them under.
"""

import logging
import sys

import structlog

from dynidp.core.config import get_settings

REDACTED = "***"

_SENSITIVE_KEYS = frozenset(
    {
        "client_secret",
        "sp_certificate",
        "sp_certificate_password",
        "code_verifier",
        "state",
        "token",
        "authorization",
    }
)

_configured = False


def redact_secrets(logger, method_name, event_dict):
    """structlog processor masking values logged under a sensitive key."""
    for key in _SENSITIVE_KEYS.intersection(event_dict):
        if event_dict[key]:
            event_dict[key] = REDACTED
    return event_dict


def configure_logging(force: bool = False) -> None:
    global _configured
    if _configured and not force:
        return

    settings = get_settings()
    level = logging.getLevelName(settings.log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        redact_secrets,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]
    if settings.app_debug:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()))
    else:
        processors += [structlog.processors.dict_tracebacks, structlog.processors.JSONRenderer()]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    # uvicorn, alembic and sqlalchemy keep logging through stdlib
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)
    _configured = True


def get_logger(name: str | None = None) -> structlog.BoundLogger:
    configure_logging()
    return structlog.get_logger(name)
