"""Credential validation and masking for provider API keys."""
from __future__ import annotations

import re
from typing import Callable

_PLACEHOLDER_PATTERNS = (
    re.compile(r"^your_.*_here$", re.IGNORECASE),
    re.compile(r"^placeholder$", re.IGNORECASE),
    re.compile(r"^change_me$", re.IGNORECASE),
    re.compile(r"^replace_this$", re.IGNORECASE),
)

MASK_CHAR = "*"
VISIBLE_CHARS = 4


def mask_secret(value: str, visible_chars: int = VISIBLE_CHARS) -> str:
    """Keep a short prefix of ``value`` and mask the rest."""
    if len(value) <= visible_chars:
        return MASK_CHAR * len(value)
    return value[:visible_chars] + MASK_CHAR * (len(value) - visible_chars)


def scrub_secret(message: str, secret: str | None) -> str:
    """Replace every occurrence of ``secret`` in ``message`` with its masked form."""
    if not secret:
        return message
    return message.replace(secret, mask_secret(secret))


def is_placeholder(value: str) -> bool:
    return any(pattern.match(value) for pattern in _PLACEHOLDER_PATTERNS)


def check_credential(
    name: str,
    value: str | None,
    validation: Callable[[str], bool] | None = None,
    *,
    provider: str = "unknown",
) -> str:
    """Return ``value`` if it is usable, otherwise raise ``CredentialMissingError``.

    The error message names the setting, never the value.
    """
    from stockai.errors import CredentialMissingError

    if not value:
        raise CredentialMissingError(f"Missing required environment variable: {name}", provider=provider)
    if is_placeholder(value):
        raise CredentialMissingError(f"Environment variable {name} contains placeholder value", provider=provider)
    if validation is not None and not validation(value):
        raise CredentialMissingError(f"Environment variable {name} failed validation", provider=provider)
    return value


def key_validator(min_length: int, pattern: str) -> Callable[[str], bool]:
    compiled = re.compile(pattern)

    def _validate(value: str) -> bool:
        return len(value) >= min_length and bool(compiled.match(value))

    return _validate
