"""
Content checksums for canonical definitions.

The checksum is a SHA-256 over a canonical JSON encoding of the page
payload, encoded as lowercase hex. Canonical encoding means:
- object keys sorted recursively
- array order preserved
- compact separators, UTF-8, no ASCII escaping
- integral floats below 2**53 written as integers (1.0 and 1 hash the same)

Invariants:
    - Only the page contributes; schema_version, checksum and extras do not
    - Key insertion order never changes the checksum
    - An absent page hashes as an empty object
    - Non-JSON values (NaN, sets, non-string keys, cycles) raise, never coerce

Example:
    >>> compute_checksum({"b": 2, "a": 1}) == compute_checksum({"a": 1, "b": 2})
    True
"""

from __future__ import annotations

import dataclasses
import hashlib
import json
import logging
import math
from typing import Any, Mapping

from .types import CanonicalDefinition

logger = logging.getLogger(__name__)

_MAX_SAFE_INTEGER = 2**53


def _normalize(value: Any, active: set[int]) -> Any:
    """Rewrite value into the plain JSON shapes the encoder accepts."""
    if value is None or isinstance(value, (bool, str, int)):
        return value
    if isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            raise ValueError(f"Out of range float value {value!r} is not JSON compliant")
        if value.is_integer() and abs(value) < _MAX_SAFE_INTEGER:
            return int(value)
        return value
    if isinstance(value, Mapping):
        marker = id(value)
        if marker in active:
            raise ValueError("Circular reference detected")
        active.add(marker)
        try:
            result = {}
            for key, item in value.items():
                if not isinstance(key, str):
                    raise TypeError(
                        f"Object keys must be strings, got {type(key).__name__}"
                    )
                result[key] = _normalize(item, active)
            return result
        finally:
            active.discard(marker)
    if isinstance(value, (list, tuple)):
        marker = id(value)
        if marker in active:
            raise ValueError("Circular reference detected")
        active.add(marker)
        try:
            return [_normalize(item, active) for item in value]
        finally:
            active.discard(marker)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def canonical_json(value: Any) -> str:
    """Encode value as canonical JSON text.

    Raises:
        TypeError: If value holds non-JSON types or non-string keys
        ValueError: If value is cyclic or holds NaN/Infinity
    """
    return json.dumps(
        _normalize(value, set()),
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        allow_nan=False,
    )


def compute_checksum(page: Any) -> str:
    """Lowercase hex SHA-256 of the canonical page encoding."""
    payload = {} if page is None else page
    return hashlib.sha256(canonical_json(payload).encode("utf-8")).hexdigest()


def apply_checksum(definition: CanonicalDefinition) -> CanonicalDefinition:
    """Return a copy of definition with its checksum recomputed."""
    checksum = compute_checksum(definition.page)
    logger.debug(
        f"Stamped checksum {checksum[:12]} at schema version {definition.schema_version}"
    )
    return dataclasses.replace(definition, checksum=checksum)


def verify_checksum(definition: CanonicalDefinition) -> bool:
    """Whether the stored checksum matches the page.

    Returns False when no checksum is stored.
    """
    if not definition.checksum:
        return False
    expected = compute_checksum(definition.page)
    if definition.checksum.lower() != expected:
        logger.warning(
            f"Checksum drift at schema version {definition.schema_version}: "
            f"stored={definition.checksum} computed={expected}"
        )
        return False
    return True


class ChecksumStamper:
    """Object seam over apply_checksum/verify_checksum.

    Example:
        >>> stamper = ChecksumStamper()
        >>> stamped = stamper.apply(definition)
        >>> stamper.verify(stamped)
        True
    """

    def apply(self, definition: CanonicalDefinition) -> CanonicalDefinition:
        return apply_checksum(definition)

    def verify(self, definition: CanonicalDefinition) -> bool:
        return verify_checksum(definition)
