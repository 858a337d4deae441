"""
Core type definitions for the versioning pipeline.

This module defines the two records the pipeline operates on:
- CanonicalDefinition: A versioned page document
- Migration: One edge of the migration graph (from -> to, transform)

Invariants:
    - Both records are frozen; pipeline steps return new values
    - schema_version, from_version and to_version are valid semantic versions
    - extras (unrelated top-level fields) survive migration untouched

How to change safely:
    - New top-level document fields belong in extras, not new attributes,
      unless the pipeline itself must read them
    - Keep the wire keys (schemaVersion, page, checksum) stable

Example:
    >>> doc = CanonicalDefinition.from_dict(
    ...     {"schemaVersion": "0.9.0", "page": {"title": "Hi"}}
    ... )
    >>> doc.schema_version
    '0.9.0'
"""

from __future__ import annotations

from dataclasses import dataclass
from dataclasses import field as dataclass_field
from typing import Any, Callable, Mapping

from .errors import InvalidDefinitionError, InvalidVersionError
from .semver import SemanticVersion

SCHEMA_VERSION_KEY = "schemaVersion"
PAGE_KEY = "page"
CHECKSUM_KEY = "checksum"

_RESERVED_KEYS = frozenset({SCHEMA_VERSION_KEY, PAGE_KEY, CHECKSUM_KEY})


@dataclass(frozen=True)
class CanonicalDefinition:
    """A versioned structured document.

    Attributes:
        schema_version: Semantic version the page conforms to
        page: Arbitrary JSON-like payload
        checksum: Lowercase hex SHA-256 of the canonical page, if stamped
        extras: Other top-level fields, carried through unchanged
    """

    schema_version: str
    page: Any = None
    checksum: str | None = None
    extras: Mapping[str, Any] = dataclass_field(default_factory=dict)

    def __post_init__(self) -> None:
        """Validate the schema version tag and store it in canonical form."""
        object.__setattr__(
            self, "schema_version", str(SemanticVersion.parse(self.schema_version))
        )

    @property
    def version(self) -> SemanticVersion:
        """Parsed schema version."""
        return SemanticVersion.parse(self.schema_version)

    def to_dict(self) -> dict[str, Any]:
        """Convert to the wire representation (camelCase keys)."""
        result: dict[str, Any] = dict(self.extras)
        result[SCHEMA_VERSION_KEY] = self.schema_version
        if self.page is not None:
            result[PAGE_KEY] = self.page
        if self.checksum:
            result[CHECKSUM_KEY] = self.checksum
        return result

    @classmethod
    def from_dict(cls, data: Any) -> CanonicalDefinition:
        """Create from the wire representation.

        Raises:
            InvalidDefinitionError: If data is not a mapping or its
                schemaVersion is missing or malformed
        """
        if not isinstance(data, Mapping):
            raise InvalidDefinitionError(
                f"Definition must be a JSON object, got {type(data).__name__}"
            )
        version = data.get(SCHEMA_VERSION_KEY)
        if not isinstance(version, str):
            raise InvalidDefinitionError(
                f"Definition is missing a string '{SCHEMA_VERSION_KEY}'",
                field_name=SCHEMA_VERSION_KEY,
            )
        checksum = data.get(CHECKSUM_KEY)
        if checksum == "":
            checksum = None
        if checksum is not None and not isinstance(checksum, str):
            raise InvalidDefinitionError(
                f"'{CHECKSUM_KEY}' must be a string", field_name=CHECKSUM_KEY
            )
        extras = {k: v for k, v in data.items() if k not in _RESERVED_KEYS}
        try:
            return cls(
                schema_version=version,
                page=data.get(PAGE_KEY),
                checksum=checksum,
                extras=extras,
            )
        except InvalidVersionError as e:
            raise InvalidDefinitionError(
                e.message, field_name=SCHEMA_VERSION_KEY
            ) from e


Transform = Callable[[CanonicalDefinition], CanonicalDefinition]


@dataclass(frozen=True)
class Migration:
    """One edge of the migration graph.

    The transform is an opaque pure function. It receives a definition
    shaped for from_version and returns the rewritten definition; the
    engine tags the result with to_version.

    Attributes:
        from_version: Source schema version
        to_version: Target schema version
        transform: Pure function over CanonicalDefinition
        description: Human-readable label for logs and plans
    """

    from_version: str
    to_version: str
    transform: Transform
    description: str = ""

    def __post_init__(self) -> None:
        """Validate migration definition; versions are stored canonically."""
        object.__setattr__(self, "from_version", str(SemanticVersion.parse(self.from_version)))
        object.__setattr__(self, "to_version", str(SemanticVersion.parse(self.to_version)))
        if not callable(self.transform):
            raise TypeError(
                f"Migration {self.from_version} -> {self.to_version}: "
                f"transform must be callable"
            )

    @property
    def label(self) -> str:
        base = f"{self.from_version} -> {self.to_version}"
        return f"{base} ({self.description})" if self.description else base

    def to_dict(self) -> dict[str, str]:
        """Convert to dictionary representation (transform omitted)."""
        return {
            "from": self.from_version,
            "to": self.to_version,
            "description": self.description,
        }
