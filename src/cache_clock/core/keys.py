"""Lookup key derivation.

Any input is stringified (strings pass through, ``None`` becomes ``""``,
everything else is compact JSON) and then folded into a short base-32 hash.
The hash is deterministic but not collision-free; it is a lookup
accelerator, not an identity.
"""

from __future__ import annotations

import json
from typing import Any

from cache_clock.exceptions import KeyDerivationError

_DIGITS = "0123456789abcdefghijklmnopqrstuv"


def stringify(value: Any) -> str:
    """Return the structural string form of *value*."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    try:
        return json.dumps(value, separators=(",", ":"), ensure_ascii=False, allow_nan=True)
    except (TypeError, ValueError) as e:
        raise KeyDerivationError(value, str(e)) from e


def _to_signed_32(n: int) -> int:
    n &= 0xFFFFFFFF
    return n - 0x100000000 if n & 0x80000000 else n


def _to_base32(n: int) -> str:
    if n == 0:
        return "0"
    sign = "-" if n < 0 else ""
    n = abs(n)
    digits = []
    while n:
        n, rem = divmod(n, 32)
        digits.append(_DIGITS[rem])
    return sign + "".join(reversed(digits))


def hash_key(text: str) -> str:
    """Fold *text* into a signed 32-bit hash rendered in base 32.

    The fold runs over UTF-16 code units, so characters outside the BMP
    contribute their surrogate pair and hashes agree with JavaScript
    ``charCodeAt`` implementations.
    """
    data = text.encode("utf-16-le", "surrogatepass")
    acc = 0
    for i in range(0, len(data), 2):
        unit = data[i] | (data[i + 1] << 8)
        acc = _to_signed_32((acc << 5) - acc + acc * 24 + unit)
    return _to_base32(acc)


def create_entity_key(key: Any, is_hashed: bool = False) -> str:
    """Derive the lookup key for *key*.

    When *is_hashed* is true the caller asserts *key* is already a derived
    key and it is returned unchanged.
    """
    if is_hashed:
        return key
    return hash_key(stringify(key))
