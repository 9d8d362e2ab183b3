"""
Logging setup for the importer: stderr plus an optional rotating file, with
access tokens, bearer headers and share keys masked in every record.
"""
import logging
import re
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

_KEY_VALUE_RE = re.compile(
    r"(?i)\b(ACCESS_TOKEN|cqu_edu_ACCESS_TOKEN|TOKEN|SHARE_KEY|key|PASSWORD)\s*[:=]\s*([^\s&]+)"
)
_AUTH_BEARER_RE = re.compile(r"(?i)\bAuthorization:\s*Bearer\s+([A-Za-z0-9._-]+)")
_BEARER_RE = re.compile(r"(?i)\bBearer\s+([A-Za-z0-9._-]+)")


def _redact(text: str) -> str:
    redacted = _KEY_VALUE_RE.sub(lambda match: f"{match.group(1)}=[REDACTED]", text)
    redacted = _AUTH_BEARER_RE.sub("Authorization: Bearer [REDACTED]", redacted)
    redacted = _BEARER_RE.sub("Bearer [REDACTED]", redacted)
    return redacted


class RedactingFormatter(logging.Formatter):
    def formatException(self, ei):
        return _redact(super().formatException(ei))

    def formatStack(self, stack_info):
        return _redact(super().formatStack(stack_info))


class RedactingFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        record.msg = _redact(message)
        record.args = ()
        return True


def setup_logging(level: str = "WARNING", log_file: Optional[str] = None) -> None:
    """
    Configures logging for the importer.
    output: stderr, plus a rotating file when log_file is given
    """
    formatter = RedactingFormatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(
            RotatingFileHandler(log_file, maxBytes=5 * 1024 * 1024, backupCount=2, encoding="utf-8")
        )
    for handler in handlers:
        handler.setFormatter(formatter)
        handler.addFilter(RedactingFilter())

    root_logger = logging.getLogger()
    # Handlers from an earlier call are replaced
    for old in list(root_logger.handlers):
        if isinstance(old.formatter, RedactingFormatter):
            root_logger.removeHandler(old)
            old.close()
    root_logger.setLevel(getattr(logging, level.upper(), logging.WARNING))
    for handler in handlers:
        root_logger.addHandler(handler)

    # Selenium and urllib3 are chatty at INFO
    logging.getLogger("selenium").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("WDM").setLevel(logging.WARNING)
