"""
Logging configuration with secret redaction
"""

import logging
import logging.config
import re
from typing import Any, Dict

_SECRET_PATTERN = re.compile(
    r"(?i)\b(password|\w*token|authorization|\w*secret)"
    r"(['\"]?\s*[:=]\s*['\"]?)((?:bearer\s+)?[^\s'\",}]+)"
)


class SecretRedactionFilter(logging.Filter):
    """Filter that masks credential and token values in log messages."""

    def filter(self, record: logging.LogRecord) -> bool:
        """Rewrite the record message with secret values masked."""
        message = record.getMessage()
        redacted = _SECRET_PATTERN.sub(r"\1\2[redacted]", message)
        if redacted != message:
            record.msg = redacted
            record.args = None
        return True  # Never drop records, only rewrite them


def get_logging_config(level: str = "INFO") -> Dict[str, Any]:
    """Get logging configuration with secret redaction."""
    level = level.upper()
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {
            "secret_redaction": {
                "()": SecretRedactionFilter
            }
        },
        "formatters": {
            "default": {
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
            }
        },
        "handlers": {
            "default": {
                "class": "logging.StreamHandler",
                "formatter": "default",
                "stream": "ext://sys.stdout",
                "filters": ["secret_redaction"]
            }
        },
        "loggers": {
            "authd": {
                "handlers": ["default"],
                "level": level,
                "propagate": False
            },
            "redis": {
                "handlers": ["default"],
                "level": "WARNING",
                "propagate": False
            }
        },
        "root": {
            "level": level,
            "handlers": ["default"]
        }
    }


def configure_logging(level: str = "INFO") -> None:
    """Apply the authd logging configuration."""
    logging.config.dictConfig(get_logging_config(level))
