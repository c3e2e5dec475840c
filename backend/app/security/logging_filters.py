"""Logging filters that scrub sensitive content."""

from __future__ import annotations

import logging
import re

_SENSITIVE_PATTERN = re.compile(
    r"(Authorization: Bearer\s+[\w\.-]+|access_token\"\s*:\s*\"[^\"]+\"|password\"\s*:\s*\"[^\"]+\")",
    re.IGNORECASE,
)
_EMAIL_PATTERN = re.compile(r"\b([\w.+-])[\w.+-]*@([\w-]+\.[\w.-]+)\b")


class SensitiveFilter(logging.Filter):
    """Replace tokens, passwords and guest e-mail addresses in log messages."""

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.msg, str):
            message = _SENSITIVE_PATTERN.sub("**REDACTED**", record.msg)
            record.msg = _EMAIL_PATTERN.sub(r"\1***@\2", message)
        return True


__all__ = ["SensitiveFilter"]
