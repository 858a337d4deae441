"""
Migration engine for canonical definitions.

The engine advances a definition from the schema version it was saved at
to the latest supported version by walking the registry one edge at a
time and applying each transform in order.

Invariants:
    - Result is exactly at latest_version, or an error is raised
    - No partially migrated definition is ever returned
    - A version visited twice in one walk is a loop, never retried
    - Versions above latest are rejected; there is no downgrade path
    - The input definition and the registry are never mutated

How to change safely:
    - Keep plan() and migrate_to_latest() walking the graph identically
    - Transforms must stay pure; the engine only guarantees a private
      copy of the page, not of anything the transform closes over

Example:
    >>> engine = MigrationEngine(registry, latest_version="1.0.0")
    >>> migrated = engine.migrate_to_latest(definition)
    >>> migrated.schema_version
    '1.0.0'
"""

from __future__ import annotations

import copy
import dataclasses
import logging
from typing import List, Optional

from .errors import (
    MigrationLoopError,
    MigrationTransformError,
    NoMigrationPathError,
    UnsupportedFutureVersionError,
)
from .registry import MigrationRegistry
from .semver import SemanticVersion, VersionLike
from .types import CanonicalDefinition, Migration

logger = logging.getLogger(__name__)

LATEST_SCHEMA_VERSION = "1.0.0"


class MigrationEngine:
    """Walks a MigrationRegistry up to the latest schema version.

    Attributes:
        registry: Source of migration edges (read-only here)
        latest_version: Schema version every result is brought to
    """

    def __init__(
        self,
        registry: MigrationRegistry,
        latest_version: VersionLike = LATEST_SCHEMA_VERSION,
    ) -> None:
        self.registry = registry
        self._latest = SemanticVersion.parse(latest_version)
        self.latest_version = str(self._latest)
        if not registry.frozen:
            logger.warning("Migration engine created over an unfrozen registry")

    def needs_migration(self, definition: CanonicalDefinition) -> bool:
        """Whether definition is below the latest version."""
        return definition.version < self._latest

    def plan(self, version: VersionLike) -> List[Migration]:
        """Migrations that would be applied to a document at version.

        Raises the same errors as migrate_to_latest without running any
        transform.
        """
        steps: List[Migration] = []
        current = SemanticVersion.parse(version)
        visited: List[SemanticVersion] = []
        while current < self._latest:
            migration = self._next_step(current, visited)
            steps.append(migration)
            current = SemanticVersion.parse(migration.to_version)
        self._reject_future(current)
        return steps

    def migrate_to_latest(self, definition: CanonicalDefinition) -> CanonicalDefinition:
        """Advance definition to the latest schema version.

        Args:
            definition: Document at any registered schema version

        Returns:
            New definition at latest_version (or definition itself when it
            is already there)

        Raises:
            MigrationLoopError: If a version is revisited
            NoMigrationPathError: If a version below latest has no migration
            UnsupportedFutureVersionError: If the version exceeds latest
            MigrationTransformError: If a transform returns a non-definition
        """
        start = definition.schema_version
        current = definition
        visited: List[SemanticVersion] = []

        if current.version < self._latest:
            current = dataclasses.replace(
                definition,
                page=copy.deepcopy(definition.page),
                extras=copy.deepcopy(dict(definition.extras)),
            )

        while current.version < self._latest:
            migration = self._next_step(current.version, visited)
            result = migration.transform(current)
            if not isinstance(result, CanonicalDefinition):
                raise MigrationTransformError(migration.label, result)
            current = dataclasses.replace(
                result,
                schema_version=migration.to_version,
                checksum=None,
            )
            logger.debug(f"Applied migration {migration.label}")

        self._reject_future(current.version)

        if visited:
            logger.info(
                f"Migrated definition {start} -> {current.schema_version} "
                f"in {len(visited)} step(s)"
            )
        return current

    def _next_step(
        self, version: SemanticVersion, visited: List[SemanticVersion]
    ) -> Migration:
        if version in visited:
            raise MigrationLoopError(str(version), [str(v) for v in visited])
        visited.append(version)
        migration: Optional[Migration] = self.registry.find_migration(version)
        if migration is None:
            raise NoMigrationPathError(str(version), self.latest_version)
        return migration

    def _reject_future(self, version: SemanticVersion) -> None:
        if version > self._latest:
            logger.warning(
                f"Rejecting schema version {version}: newer than {self.latest_version}"
            )
            raise UnsupportedFutureVersionError(str(version), self.latest_version)
