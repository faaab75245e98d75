# workforce/logging_filters.py
import logging
import re
from typing import Any, Mapping

REDACTION = "****"
SENSITIVE_KEYS = {
    "password", "token", "authorization",
    "email", "phone", "ssn", "national_id",
    "bank_account", "iban",
}
# Structured `extra=` attributes that must never reach a handler verbatim
SENSITIVE_RECORD_ATTRS = ("email", "phone", "bank_account", "iban", "employee_name")

_email_re = re.compile(r"([A-Za-z0-9._%+-]+)@([A-Za-z0-9.-]+\.[A-Za-z]{2,})")
_token_like_re = re.compile(r"(?:(?:Bearer|Token)\s+)[A-Za-z0-9\-_]{20,}")
_iban_re = re.compile(r"\b[A-Z]{2}\d{2}[A-Z0-9]{11,30}\b")


def _redact_scalar(value: Any) -> Any:
    if value is None or isinstance(value, (int, float, bool)):
        return value
    s = str(value)
    s = _email_re.sub(r"***@\2", s)
    s = _token_like_re.sub(REDACTION, s)
    s = _iban_re.sub(REDACTION, s)
    return s


def _redact(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {
            k: (REDACTION if isinstance(k, str) and k.lower() in SENSITIVE_KEYS else _redact(v))
            for k, v in value.items()
        }
    if isinstance(value, (list, tuple, set)):
        return type(value)(_redact(v) for v in value)
    return _redact_scalar(value)


class PIIRedactorFilter(logging.Filter):
    """Redact contact and banking details from log messages and structured extras."""

    def filter(self, record: logging.LogRecord) -> bool:
        try:
            if isinstance(record.msg, str):
                record.msg = _redact_scalar(record.msg)

            args = getattr(record, "args", None)
            if args:
                if isinstance(args, Mapping):
                    record.args = _redact(args)
                elif isinstance(args, (tuple, list)):
                    record.args = tuple(_redact(a) for a in args)
                else:
                    record.args = _redact(args)

            for attr in SENSITIVE_RECORD_ATTRS:
                if attr in record.__dict__:
                    record.__dict__[attr] = REDACTION
        except (TypeError, ValueError):
            # never break logging
            pass
        return True
