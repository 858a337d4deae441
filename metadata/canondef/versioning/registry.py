"""
Migration Registry for canonical definitions.

The MigrationRegistry holds the finite set of migration edges.
It provides:
- Registration of migrations, at most one per source version
- Lookup by source version
- Registry fingerprinting for consistency checks
- Freeze mechanism to prevent runtime modifications

Invariants:
    - Registry is mutable during startup, frozen before documents flow
    - Once frozen, no new migrations can be registered
    - Each source version has at most one outgoing migration
    - Source versions are compared numerically ("1.0.0" == "v1.0.0")

How to change safely:
    - Register every migration before calling freeze()
    - Run validate_all() (or the check-registry CLI) before deployment
    - Build a fresh registry per test instead of sharing one

Example:
    >>> registry = MigrationRegistry()
    >>> registry.register(Migration("0.9.0", "1.0.0", add_field("migrated", True)))
    >>> registry.freeze()
    'sha256:...'
    >>> registry.find_migration("0.9.0").to_version
    '1.0.0'
"""

from __future__ import annotations

import hashlib
import json
import logging
import threading
from typing import Dict, Iterable, Iterator, Optional

from .errors import DuplicateMigrationError, RegistryFrozenError
from .semver import SemanticVersion, VersionLike, is_valid_version
from .types import Migration

logger = logging.getLogger(__name__)


class MigrationRegistry:
    """Registry of migration edges keyed by source version.

    Thread-safety:
        - Registration is thread-safe (uses internal lock)
        - Lookups after freeze are lock-free
        - Freeze is atomic and irreversible

    Attributes:
        frozen: Whether the registry is frozen (immutable)
        fingerprint: SHA-256 hash of the edges (computed on freeze)
    """

    def __init__(self) -> None:
        """Initialize an empty, mutable registry."""
        self._migrations: Dict[SemanticVersion, Migration] = {}
        self._frozen = False
        self._fingerprint: Optional[str] = None
        self._lock = threading.Lock()

    @classmethod
    def from_migrations(
        cls,
        migrations: Iterable[Migration],
        freeze: bool = True,
    ) -> MigrationRegistry:
        """Build a registry from migrations in one call.

        Args:
            migrations: Migrations to register
            freeze: Whether to freeze the registry afterwards

        Raises:
            DuplicateMigrationError: If two migrations share a source version
        """
        registry = cls()
        for migration in migrations:
            registry.register(migration)
        if freeze:
            registry.freeze()
        return registry

    @property
    def frozen(self) -> bool:
        """Whether the registry is frozen."""
        return self._frozen

    @property
    def fingerprint(self) -> Optional[str]:
        """Registry fingerprint (available after freeze)."""
        return self._fingerprint

    def register(self, migration: Migration) -> None:
        """Register a migration edge.

        Raises:
            RegistryFrozenError: If registry is frozen
            DuplicateMigrationError: If from_version already has a migration
        """
        key = SemanticVersion.parse(migration.from_version)
        with self._lock:
            if self._frozen:
                raise RegistryFrozenError(
                    f"Cannot register migration {migration.label}: registry is frozen"
                )

            existing = self._migrations.get(key)
            if existing is not None:
                raise DuplicateMigrationError(
                    migration.from_version,
                    existing_to=existing.to_version,
                    new_to=migration.to_version,
                )

            self._migrations[key] = migration
            logger.debug(f"Registered migration: {migration.label}")

    def find_migration(self, from_version: VersionLike) -> Optional[Migration]:
        """Get the migration leaving from_version, or None."""
        return self._migrations.get(SemanticVersion.parse(from_version))

    def migrations(self) -> Iterator[Migration]:
        """Iterate over migrations, ordered by source version."""
        for key in sorted(self._migrations):
            yield self._migrations[key]

    def __len__(self) -> int:
        return len(self._migrations)

    def __contains__(self, version: object) -> bool:
        if not is_valid_version(version):
            return False
        return SemanticVersion.parse(version) in self._migrations  # type: ignore[arg-type]

    def freeze(self) -> str:
        """Freeze the registry and compute fingerprint.

        Returns:
            Registry fingerprint string

        Raises:
            RegistryFrozenError: If already frozen
        """
        with self._lock:
            if self._frozen:
                raise RegistryFrozenError("Registry is already frozen")

            self._fingerprint = self._compute_fingerprint()
            self._frozen = True
            logger.info(
                f"Migration registry frozen with {len(self._migrations)} migrations, "
                f"fingerprint={self._fingerprint}"
            )
            return self._fingerprint

    def _compute_fingerprint(self) -> str:
        """Compute SHA-256 fingerprint over the sorted edge list.

        Transform bodies are opaque and do not contribute.
        """
        canonical = json.dumps(self.to_dict(), sort_keys=True, separators=(",", ":"))
        hash_bytes = hashlib.sha256(canonical.encode("utf-8")).hexdigest()
        return f"sha256:{hash_bytes}"

    def to_dict(self) -> dict:
        """Convert registry to dictionary representation.

        Returns:
            Dictionary with a 'migrations' list sorted by source version.
        """
        return {"migrations": [m.to_dict() for m in self.migrations()]}

    def validate_all(self, latest_version: VersionLike) -> list[str]:
        """Check that every registered source reaches latest_version.

        Walks the graph from each source without running any transform.

        Returns:
            List of validation errors (empty if valid)
        """
        latest = SemanticVersion.parse(latest_version)
        errors: list[str] = []

        for source, migration in sorted(self._migrations.items()):
            if SemanticVersion.parse(migration.to_version) <= source:
                errors.append(
                    f"Migration {migration.label} does not move forward"
                )

        for source in sorted(self._migrations):
            problem = self._walk_problem(source, latest)
            if problem and problem not in errors:
                errors.append(problem)

        return errors

    def _walk_problem(
        self, start: SemanticVersion, latest: SemanticVersion
    ) -> Optional[str]:
        visited: set[SemanticVersion] = set()
        current = start
        while current < latest:
            if current in visited:
                return f"Walk from {start} loops back to {current}"
            visited.add(current)
            migration = self._migrations.get(current)
            if migration is None:
                return f"Walk from {start} dead-ends at {current} (latest is {latest})"
            current = SemanticVersion.parse(migration.to_version)
        if current > latest:
            return f"Walk from {start} overshoots latest {latest} at {current}"
        return None
