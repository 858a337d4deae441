"""
Error types for the canonical-definition versioning pipeline.

This module defines all exception types raised while migrating and
fingerprinting definitions:
- CanonDefError: Base exception
- MigrationError: Registry and engine failures
- InvalidVersionError: Unparseable schema version string
- InvalidDefinitionError: Malformed raw document

Invariants:
    - All errors inherit from CanonDefError
    - Errors include context for debugging (versions, migration labels)
    - Every error is fatal; nothing here is retried by the pipeline
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional


class CanonDefError(Exception):
    """Base exception for all pipeline errors.

    Attributes:
        message: Error message
        code: Error code for programmatic handling
        details: Additional error context
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or "CANONDEF_ERROR"
        self.details = details or {}


class InvalidVersionError(CanonDefError, ValueError):
    """A schema version string is not MAJOR.MINOR.PATCH."""

    def __init__(self, version: Any) -> None:
        super().__init__(
            f"Invalid schema version {version!r}: expected MAJOR.MINOR.PATCH",
            code="INVALID_VERSION",
            details={"version": version},
        )
        self.version = version


class InvalidDefinitionError(CanonDefError):
    """Raw document cannot be read as a canonical definition."""

    def __init__(self, message: str, field_name: Optional[str] = None) -> None:
        super().__init__(
            message,
            code="INVALID_DEFINITION",
            details={"field": field_name},
        )
        self.field_name = field_name


class MigrationError(CanonDefError):
    """Base class for migration registry and engine failures."""


class DuplicateMigrationError(MigrationError):
    """A second migration was registered from an already-registered version.

    Raised at registration time, before any document is processed.
    """

    def __init__(self, from_version: str, existing_to: str, new_to: str) -> None:
        super().__init__(
            f"Migration from {from_version} already registered "
            f"(-> {existing_to}); refusing second migration -> {new_to}",
            code="DUPLICATE_MIGRATION",
            details={
                "from": from_version,
                "existing_to": existing_to,
                "new_to": new_to,
            },
        )
        self.from_version = from_version


class RegistryFrozenError(MigrationError):
    """Raised when attempting to modify a frozen registry."""

    def __init__(self, message: str) -> None:
        super().__init__(message, code="REGISTRY_FROZEN")


class MigrationLoopError(MigrationError):
    """A schema version was revisited during one migration walk.

    Indicates a misconfigured registry.

    Attributes:
        version: The version seen twice
        path: Versions visited, in order, before the loop closed
    """

    def __init__(self, version: str, path: List[str]) -> None:
        chain = " -> ".join(path + [version])
        super().__init__(
            f"Migration loop detected at schema version {version}: {chain}",
            code="MIGRATION_LOOP",
            details={"version": version, "path": list(path)},
        )
        self.version = version
        self.path = list(path)


class NoMigrationPathError(MigrationError):
    """No migration is registered from the document's current version."""

    def __init__(self, version: str, latest_version: str) -> None:
        super().__init__(
            f"No migration registered from schema version {version} "
            f"(latest is {latest_version})",
            code="NO_MIGRATION_PATH",
            details={"version": version, "latest": latest_version},
        )
        self.version = version
        self.latest_version = latest_version


class UnsupportedFutureVersionError(MigrationError):
    """Document was written by a newer runtime than this one.

    No downgrade is attempted; the runtime must be upgraded.
    """

    def __init__(self, version: str, latest_version: str) -> None:
        super().__init__(
            f"Schema version {version} is newer than the latest supported "
            f"version {latest_version}",
            code="UNSUPPORTED_FUTURE_VERSION",
            details={"version": version, "latest": latest_version},
        )
        self.version = version
        self.latest_version = latest_version


class MigrationTransformError(MigrationError):
    """A transform returned something other than a CanonicalDefinition."""

    def __init__(self, label: str, returned: Any) -> None:
        super().__init__(
            f"Migration {label} returned {type(returned).__name__}, "
            f"expected CanonicalDefinition",
            code="MIGRATION_TRANSFORM",
            details={"migration": label, "returned_type": type(returned).__name__},
        )
        self.label = label
