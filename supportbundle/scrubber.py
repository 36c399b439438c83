"""Structured configuration scrubbing: redacts sensitive keys in nested mappings."""

import copy
from collections.abc import Iterable, Mapping
from typing import Any

from supportbundle.config import DEFAULT_SENSITIVE_KEYS
from supportbundle.privacy import strip_url_credentials

REDACTED = "[REDACTED]"


def is_sensitive_key(key: Any, sensitive_keys: Iterable[str]) -> bool:
    """True if any sensitive substring occurs in *key*, compared case-insensitively."""
    lowered = str(key).lower()
    return any(s.lower() in lowered for s in sensitive_keys)


def _scrub_value(value: Any, sensitive_keys: tuple[str, ...]) -> Any:
    if isinstance(value, Mapping):
        result = {}
        for key, item in value.items():
            if is_sensitive_key(key, sensitive_keys):
                result[key] = REDACTED
            else:
                result[key] = _scrub_value(item, sensitive_keys)
        return result
    if isinstance(value, (list, tuple)):
        return [_scrub_value(item, sensitive_keys) for item in value]
    if isinstance(value, str):
        return strip_url_credentials(value)
    return copy.deepcopy(value)


def scrub_config(config: Mapping, sensitive_keys: Iterable[str] = DEFAULT_SENSITIVE_KEYS) -> dict:
    """Return a scrubbed deep copy of *config*.

    Values under keys matching *sensitive_keys* become ``[REDACTED]`` whatever
    their type. Nested mappings are recursed into, sequences are scrubbed
    element-wise, and strings lose any ``user:pass@`` URL credentials.
    The input mapping is never modified.
    """
    return _scrub_value(config, tuple(sensitive_keys))
