"""Structured exception hierarchy for cache clock operations.

Cache misses and expirations are never errors (they return ``None``).
These exceptions cover the few inputs the clock cannot make sense of.
Every exception carries ``error_type``, ``suggestions``, and ``metadata``
so callers can report them without parsing the message.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional


class CacheClockError(Exception):
    """Base exception for all cache clock errors.

    Attributes:
        error_type: Machine-readable error category.
        suggestions: Actionable recovery steps for the caller.
        metadata: Structured context for debugging.
    """

    error_type: str = "unknown"

    def __init__(
        self,
        message: str,
        *,
        suggestions: Optional[List[str]] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.suggestions = suggestions or []
        self.metadata = metadata or {}

    def to_dict(self) -> Dict[str, Any]:
        """Serialise for logs and error reports."""
        return {
            "error_type": self.error_type,
            "error": str(self),
            "suggestions": self.suggestions,
            "metadata": self.metadata,
        }


class KeyDerivationError(CacheClockError):
    """A cache key could not be stringified into a stable lookup key."""

    error_type = "invalid_key"

    def __init__(self, key: Any, reason: str, **kwargs: Any):
        self.key_type = type(key).__name__
        super().__init__(
            f"Unable to derive a cache key from {self.key_type}: {reason}",
            suggestions=[
                "Use a string, number, bool, None, list, tuple or dict as the key",
                "Or derive the key yourself and pass is_hashed=True",
            ],
            metadata={"key_type": self.key_type},
            **kwargs,
        )


class ConfigurationError(CacheClockError):
    """Environment configuration could not be parsed."""

    error_type = "configuration"

    def __init__(self, variable: str, value: str, expected: str, **kwargs: Any):
        self.variable = variable
        self.value = value
        super().__init__(
            f"Environment variable {variable}={value!r} is not a valid {expected}",
            suggestions=[
                f"Set {variable} to a valid {expected} or unset it to use the default",
            ],
            metadata={"variable": variable, "value": value, "expected": expected},
            **kwargs,
        )
