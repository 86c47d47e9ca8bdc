from __future__ import annotations

import re
from typing import Any


_EMAIL_RE = re.compile(r"\b[A-Za-z0-9._%+\-]+@[A-Za-z0-9.\-]+\.[A-Za-z]{2,}\b")
_CARD_NUMBER_RE = re.compile(r"\b\d{12,19}\b")

_BEARER_RE = re.compile(r"(?i)\bBearer\s+[A-Za-z0-9\-._~+/]+=*")
_STRIPE_SECRET_RE = re.compile(r"\b(?:sk|rk)_(?:live|test)_[A-Za-z0-9]{16,}\b")
_STRIPE_PUBLISHABLE_RE = re.compile(r"\bpk_(?:live|test)_[A-Za-z0-9]{16,}\b")
_STRIPE_WEBHOOK_RE = re.compile(r"\bwhsec_[A-Za-z0-9]{16,}\b")

_MAX_TEXT = 1200


def mask_pii_text(text: str) -> str:
    if not text:
        return text
    out = _EMAIL_RE.sub("[REDACTED_EMAIL]", text)
    out = _CARD_NUMBER_RE.sub("[REDACTED_NUMBER]", out)
    return out


def redact_secrets_text(text: str) -> str:
    if not text:
        return text
    out = text
    out = _BEARER_RE.sub("Bearer [REDACTED_TOKEN]", out)
    out = _STRIPE_SECRET_RE.sub("[REDACTED_STRIPE_SECRET]", out)
    out = _STRIPE_PUBLISHABLE_RE.sub("[REDACTED_STRIPE_PUBLISHABLE]", out)
    out = _STRIPE_WEBHOOK_RE.sub("[REDACTED_STRIPE_WEBHOOK_SECRET]", out)
    return out


def sanitize_for_log(value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, str):
        return redact_secrets_text(mask_pii_text(value))[:_MAX_TEXT]
    if isinstance(value, list):
        return [sanitize_for_log(v) for v in value]
    if isinstance(value, dict):
        return {str(k)[:128]: sanitize_for_log(v) for k, v in value.items()}
    if isinstance(value, (int, float, bool)):
        return value
    return str(value)[:_MAX_TEXT]
