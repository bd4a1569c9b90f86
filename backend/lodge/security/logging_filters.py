"""Logging filters that scrub guest contact details."""

from __future__ import annotations

import logging
import re

_SENSITIVE_PATTERN = re.compile(
    r"([\w.+-]+@[\w-]+(?:\.[\w-]+)+"
    r"|(?<![\w-])(?:\+\d{1,3}[\s-])?\(?\d{2,4}\)?[\s-]\d{2,4}[\s-]\d{3,4}(?![\w-]))",
)


class SensitiveFilter(logging.Filter):
    """Replace e-mail addresses and phone numbers with a redaction marker."""

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.msg, str):
            record.msg = _SENSITIVE_PATTERN.sub("**REDACTED**", record.msg)
        if isinstance(record.args, tuple):
            record.args = tuple(
                _SENSITIVE_PATTERN.sub("**REDACTED**", arg) if isinstance(arg, str) else arg
                for arg in record.args
            )
        return True


__all__ = ["SensitiveFilter"]
