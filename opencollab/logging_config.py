"""
Custom logging configuration that keeps session tokens out of log output
"""

import logging
import logging.config
import re
from typing import Any, Dict

TOKEN_PATTERN = re.compile(
    r"\b([0-9a-fA-F]{8})-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}\b"
)


def redact_tokens(text: str) -> str:
    """Mask session tokens, keeping the first 8 characters for correlation."""
    return TOKEN_PATTERN.sub(r"\1-****", text)


class TokenRedactionFilter(logging.Filter):
    """Filter that masks bearer session tokens in log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        try:
            message = record.getMessage()
        except (TypeError, ValueError):
            # Bad format args are reported by Handler.handleError, not here
            return True
        redacted = redact_tokens(message)
        if redacted != message:
            # Freeze the formatted message so args cannot reintroduce the token
            record.msg = redacted
            record.args = ()
        return True  # Never drop records, only rewrite them


def get_logging_config(level: str = "INFO") -> Dict[str, Any]:
    """Get logging configuration with token redaction."""
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {
            "token_redaction_filter": {
                "()": TokenRedactionFilter
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
                "filters": ["token_redaction_filter"]
            }
        },
        "loggers": {
            "opencollab": {
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


def setup_logging(level: str = "INFO") -> None:
    """Apply the logging configuration."""
    logging.config.dictConfig(get_logging_config(level))
