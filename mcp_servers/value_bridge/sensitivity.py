"""Helpers for spotting targets whose value must not reach the logs."""

from __future__ import annotations

_SENSITIVE_SUBSTRINGS = (
    "token",
    "secret",
    "password",
    "passwd",
    "passcode",
    "pwd",
    "otp",
    "pin code",
    "cvv",
    "cvc",
    "card number",
    "api-key",
    "api_key",
    "apikey",
)

_SENSITIVE_EXACT = {
    # Avoid false-positives like "author"/"authorship" while still protecting obvious keys.
    "auth",
    "pin",
}


def is_sensitive_key(key: str) -> bool:
    k = (key or "").strip().lower()
    if not k:
        return False
    if k in _SENSITIVE_EXACT:
        return True
    return any(s in k for s in _SENSITIVE_SUBSTRINGS)


def is_sensitive_target(target: object) -> bool:
    """True when a textual target names a field that likely holds a secret.

    Index targets carry no label, so they are never treated as sensitive here.
    """
    return isinstance(target, str) and is_sensitive_key(target)
