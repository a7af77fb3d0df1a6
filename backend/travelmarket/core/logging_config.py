import logging
import re

import structlog

from travelmarket.core.settings import Settings

SENSITIVE_KEYS = {"password", "password_hash", "new_password", "cookie", "session_id", "sid"}

# session ids appearing inside free-form strings, e.g. a raw Cookie header
_SID_PATTERN = re.compile(r'(\.sid=)[^;\s]+')


def redact_sensitive(logger, method_name, event_dict):
    """Mask credentials and session identifiers before rendering"""

    def scrub(key, v):
        if key in SENSITIVE_KEYS and v is not None:
            return "REDACTED"
        if isinstance(v, str):
            return _SID_PATTERN.sub(r'\1REDACTED', v)
        if isinstance(v, list):
            return [scrub(None, x) for x in v]
        if isinstance(v, dict):
            return {k: scrub(k, vv) for k, vv in v.items()}
        return v

    for k, v in list(event_dict.items()):
        event_dict[k] = scrub(k, v)
    return event_dict


def configure_logging(settings: Settings) -> None:
    renderer = (
        structlog.processors.JSONRenderer()
        if settings.LOG_JSON
        else structlog.dev.ConsoleRenderer()
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            redact_sensitive,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handlers = [logging.StreamHandler()]
    if settings.LOG_FILE:
        handlers.append(logging.FileHandler(settings.LOG_FILE))

    # structlog handles formatting
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format='%(message)s',
        handlers=handlers,
    )
