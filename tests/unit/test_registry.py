"""
Unit tests for the migration registry.

Tests cover:
- Migration registration and lookup
- Registry freezing
- Fingerprint generation
- Duplicate detection
- Static graph validation
"""

import pytest

from metadata.canondef.versioning.errors import (
    DuplicateMigrationError,
    RegistryFrozenError,
)
from metadata.canondef.versioning.registry import MigrationRegistry
from metadata.canondef.versioning.transforms import add_field
from metadata.canondef.versioning.types import Migration


def identity(definition):
    return definition


def edge(from_version, to_version, description=""):
    return Migration(from_version, to_version, identity, description)


class TestMigrationRegistry:
    """Tests for MigrationRegistry."""

    def test_register_migration(self):
        """Can register and find a migration."""
        registry = MigrationRegistry()
        migration = Migration("0.9.0", "1.0.0", add_field("migrated", True))

        registry.register(migration)

        assert registry.find_migration("0.9.0") is migration
        assert "0.9.0" in registry
        assert len(registry) == 1

    def test_find_missing_returns_none(self):
        registry = MigrationRegistry()
        assert registry.find_migration("1.0.0") is None
        assert "1.0.0" not in registry

    def test_lookup_is_numeric(self):
        """A v-prefixed lookup finds the same edge."""
        registry = MigrationRegistry()
        registry.register(edge("1.2.0", "1.3.0"))

        assert registry.find_migration("v1.2.0").to_version == "1.3.0"

    def test_contains_ignores_garbage(self):
        registry = MigrationRegistry()
        registry.register(edge("1.2.0", "1.3.0"))

        assert "not-a-version" not in registry
        assert 3 not in registry

    def test_duplicate_from_raises(self):
        """Registering a second edge from the same version raises error."""
        registry = MigrationRegistry()
        registry.register(edge("1.0.0", "1.1.0"))

        with pytest.raises(DuplicateMigrationError, match="from 1.0.0 already registered"):
            registry.register(edge("1.0.0", "2.0.0"))

        assert registry.find_migration("1.0.0").to_version == "1.1.0"

    def test_duplicate_detected_across_spellings(self):
        registry = MigrationRegistry()
        registry.register(edge("1.0.0", "1.1.0"))

        with pytest.raises(DuplicateMigrationError):
            registry.register(edge("v1.0.0", "1.1.0"))

    def test_freeze_registry(self):
        """Can freeze registry."""
        registry = MigrationRegistry()
        registry.register(edge("0.9.0", "1.0.0"))

        fingerprint = registry.freeze()

        assert registry.frozen is True
        assert fingerprint.startswith("sha256:")
        assert registry.fingerprint == fingerprint

    def test_freeze_twice_raises(self):
        """Freezing twice raises error."""
        registry = MigrationRegistry()
        registry.freeze()

        with pytest.raises(RegistryFrozenError):
            registry.freeze()

    def test_register_after_freeze_raises(self):
        """Registering after freeze raises error."""
        registry = MigrationRegistry()
        registry.freeze()

        with pytest.raises(RegistryFrozenError, match="registry is frozen"):
            registry.register(edge("0.9.0", "1.0.0"))

    def test_from_migrations_freezes(self):
        registry = MigrationRegistry.from_migrations([edge("0.9.0", "1.0.0")])
        assert registry.frozen

    def test_from_migrations_unfrozen(self):
        registry = MigrationRegistry.from_migrations([], freeze=False)
        assert not registry.frozen

    def test_from_migrations_rejects_duplicates(self):
        with pytest.raises(DuplicateMigrationError):
            MigrationRegistry.from_migrations([edge("1.0.0", "1.1.0"), edge("1.0.0", "1.2.0")])

    def test_fingerprint_independent_of_registration_order(self):
        """Same edges produce same fingerprint."""
        a = MigrationRegistry.from_migrations([edge("0.8.0", "0.9.0"), edge("0.9.0", "1.0.0")])
        b = MigrationRegistry.from_migrations([edge("0.9.0", "1.0.0"), edge("0.8.0", "0.9.0")])

        assert a.fingerprint == b.fingerprint

    def test_fingerprint_changes_with_edges(self):
        """Different edges produce different fingerprint."""
        a = MigrationRegistry.from_migrations([edge("0.9.0", "1.0.0")])
        b = MigrationRegistry.from_migrations([edge("0.9.0", "1.1.0")])

        assert a.fingerprint != b.fingerprint

    def test_iterate_sorted_numerically(self):
        registry = MigrationRegistry.from_migrations(
            [edge("10.0.0", "11.0.0"), edge("2.0.0", "10.0.0"), edge("1.10.0", "2.0.0")]
        )

        assert [m.from_version for m in registry.migrations()] == ["1.10.0", "2.0.0", "10.0.0"]

    def test_to_dict(self):
        registry = MigrationRegistry.from_migrations([edge("0.9.0", "1.0.0", "add flag")])

        assert registry.to_dict() == {
            "migrations": [{"from": "0.9.0", "to": "1.0.0", "description": "add flag"}]
        }


class TestValidateAll:
    """Tests for static graph validation."""

    def test_valid_chain(self):
        registry = MigrationRegistry.from_migrations(
            [edge("0.8.0", "0.9.0"), edge("0.9.0", "1.0.0")]
        )
        assert registry.validate_all("1.0.0") == []

    def test_empty_registry_is_valid(self):
        assert MigrationRegistry().validate_all("1.0.0") == []

    def test_reports_loop(self):
        registry = MigrationRegistry.from_migrations(
            [edge("1.0.0", "1.1.0"), edge("1.1.0", "1.0.0")]
        )

        errors = registry.validate_all("2.0.0")

        assert any("does not move forward" in e for e in errors)
        assert any("loops back" in e for e in errors)

    def test_reports_dead_end(self):
        registry = MigrationRegistry.from_migrations([edge("0.8.0", "0.9.0")])

        errors = registry.validate_all("1.0.0")

        assert errors == ["Walk from 0.8.0 dead-ends at 0.9.0 (latest is 1.0.0)"]

    def test_reports_overshoot(self):
        registry = MigrationRegistry.from_migrations([edge("0.9.0", "2.0.0")])

        errors = registry.validate_all("1.0.0")

        assert errors == ["Walk from 0.9.0 overshoots latest 1.0.0 at 2.0.0"]
