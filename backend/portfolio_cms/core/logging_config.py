"""Logging setup for the portfolio CMS.

JSON lines in production, plain text in development. Every record is stamped
with the current request id (set by the request context middleware) and the
service name, so a request can be followed across the menu, publish and
content services. Service code passes domain identifiers through ``extra``:

    logger.info("Portfolio approved", extra={"portfolio_id": pid, "actor_id": uid})

Passwords, hashes and session tokens never reach the output: message text is
pattern-redacted and sensitive ``extra`` keys are masked.
"""

import contextvars
import json
import logging
import re
import sys
from datetime import datetime, timezone
from typing import Optional

SERVICE_NAME = "portfolio-cms"

# Set by request_context middleware, read by _ContextFilter.
request_id_var: contextvars.ContextVar[str] = contextvars.ContextVar("request_id", default="")

# Identifiers promoted to the front of every JSON line when present.
_DOMAIN_FIELDS = ("request_id", "actor_id", "user_id", "portfolio_id", "menu_key")

_SENSITIVE_FIELDS = frozenset({
    "password", "new_password", "current_password", "password_hash", "token", "session_token",
})

_REDACTED = "***REDACTED***"

_SECRET_PATTERNS = [
    re.compile(r'(?i)(bearer\s+)[a-zA-Z0-9._\-]{20,}'),
    re.compile(r'\b(eyJ[a-zA-Z0-9_\-]{10,}\.[a-zA-Z0-9_\-]{10,}\.[a-zA-Z0-9_\-]+)\b'),
    re.compile(r'(?i)((?:password|passwd|secret|token|session|authorization)[=:]\s*)[^\s,\'"]{4,}'),
    re.compile(r'(\$2[aby]\$\d{2}\$)[./A-Za-z0-9]{53}'),  # bcrypt hashes
]


class _ContextFilter(logging.Filter):
    """Attach request id and service name to every record."""

    def __init__(self, service: str):
        super().__init__()
        self.service = service

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_var.get("") or "-"
        record.service = self.service
        return True


class _SecretFilter(logging.Filter):
    """Mask secrets in message text, exception text and sensitive extras."""

    def filter(self, record: logging.LogRecord) -> bool:
        if record.args:
            record.msg = record.getMessage()
            record.args = None
        record.msg = redact(str(record.msg))
        if record.exc_text:
            record.exc_text = redact(record.exc_text)
        for key in _SENSITIVE_FIELDS.intersection(record.__dict__):
            setattr(record, key, _REDACTED)
        return True


def redact(text: str) -> str:
    for pattern in _SECRET_PATTERNS:
        text = pattern.sub(
            lambda m: m.group(1) + _REDACTED if m.group(1) != m.group(0) else _REDACTED, text
        )
    return text


class _JsonFormatter(logging.Formatter):
    """One JSON object per record: standard fields, domain ids, then other extras."""

    _RESERVED = frozenset(logging.LogRecord("", 0, "", 0, "", (), None).__dict__) | {"service", "request_id"}

    def format(self, record: logging.LogRecord) -> str:
        payload: dict = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "service": getattr(record, "service", SERVICE_NAME),
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in _DOMAIN_FIELDS:
            value = getattr(record, key, None)
            if value not in (None, "", "-"):
                payload[key] = value

        for key, value in record.__dict__.items():
            if key not in self._RESERVED and key not in payload:
                payload[key] = value

        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=str)


def setup_logging(
    log_level: Optional[str] = None,
    log_format: Optional[str] = None,
    service: str = SERVICE_NAME,
) -> None:
    """Configure the root logger.

    Args:
        log_level: DEBUG, INFO, WARNING, ERROR or CRITICAL. Defaults to INFO.
        log_format: ``"json"`` (default) or ``"text"``.
        service: Name stamped on every record.
    """
    level = (log_level or "INFO").upper()
    fmt = (log_format or "json").lower()

    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(_ContextFilter(service))
    handler.addFilter(_SecretFilter())

    if fmt == "json":
        handler.setFormatter(_JsonFormatter())
    else:
        handler.setFormatter(
            logging.Formatter(
                fmt="%(asctime)s - %(name)s - %(levelname)s - [%(request_id)s] %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("passlib").setLevel(logging.ERROR)

    logging.getLogger(__name__).info("Logging configured", extra={"level": level, "format": fmt})
