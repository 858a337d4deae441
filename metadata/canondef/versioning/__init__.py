"""
Versioning module for canonical definitions.

This module provides the migration and integrity pipeline, including:
- Semantic version ordering (SemanticVersion, less_than, ...)
- Migration registry with one outgoing edge per source version
- Migration engine that walks a document up to the latest version
- Content checksums over the canonical page encoding

Invariants:
    - A migrated document is exactly at the latest version or an error
    - Registries are explicit values, frozen before use
    - Checksums depend on the page only, never on key order

How to change safely:
    - Add a migration from the current latest version, then bump latest
    - Never edit or remove a shipped migration; documents may still need it
    - Run the check-registry CLI before deployment
"""

from .checksum import (
    ChecksumStamper,
    apply_checksum,
    canonical_json,
    compute_checksum,
    verify_checksum,
)
from .engine import LATEST_SCHEMA_VERSION, MigrationEngine
from .errors import (
    CanonDefError,
    DuplicateMigrationError,
    InvalidDefinitionError,
    InvalidVersionError,
    MigrationError,
    MigrationLoopError,
    MigrationTransformError,
    NoMigrationPathError,
    RegistryFrozenError,
    UnsupportedFutureVersionError,
)
from .registry import MigrationRegistry
from .semver import (
    SemanticVersion,
    compare_versions,
    equals,
    greater_than,
    is_valid_version,
    less_than,
)
from .transforms import add_field, remove_field, rename_field
from .types import CanonicalDefinition, Migration

__all__ = [
    # Types
    "CanonicalDefinition",
    "Migration",
    # Versions
    "SemanticVersion",
    "compare_versions",
    "less_than",
    "greater_than",
    "equals",
    "is_valid_version",
    # Registry and engine
    "MigrationRegistry",
    "MigrationEngine",
    "LATEST_SCHEMA_VERSION",
    # Checksums
    "ChecksumStamper",
    "apply_checksum",
    "canonical_json",
    "compute_checksum",
    "verify_checksum",
    # Transforms
    "add_field",
    "rename_field",
    "remove_field",
    # Errors
    "CanonDefError",
    "MigrationError",
    "DuplicateMigrationError",
    "RegistryFrozenError",
    "MigrationLoopError",
    "NoMigrationPathError",
    "UnsupportedFutureVersionError",
    "MigrationTransformError",
    "InvalidDefinitionError",
    "InvalidVersionError",
]
