"""
Unit tests for definition and migration records.

Tests cover:
- Wire conversion of CanonicalDefinition
- Validation of malformed documents
- Migration validation
- Page transform factories
"""

import dataclasses

import pytest

from metadata.canondef.versioning.errors import InvalidDefinitionError, InvalidVersionError
from metadata.canondef.versioning.transforms import add_field, remove_field, rename_field
from metadata.canondef.versioning.types import CanonicalDefinition, Migration


class TestCanonicalDefinition:
    """Tests for CanonicalDefinition."""

    def test_from_dict(self):
        doc = CanonicalDefinition.from_dict(
            {"schemaVersion": "0.9.0", "page": {"title": "Hi"}, "checksum": "ab", "kind": "blueprint"}
        )

        assert doc.schema_version == "0.9.0"
        assert doc.page == {"title": "Hi"}
        assert doc.checksum == "ab"
        assert doc.extras == {"kind": "blueprint"}

    def test_to_dict_round_trip(self):
        raw = {"schemaVersion": "1.0.0", "page": {"a": 1}, "checksum": "ff", "sourcePath": "x.xml"}

        assert CanonicalDefinition.from_dict(raw).to_dict() == raw

    def test_empty_checksum_treated_as_absent(self):
        doc = CanonicalDefinition.from_dict({"schemaVersion": "1.0.0", "checksum": ""})

        assert doc.checksum is None
        assert "checksum" not in doc.to_dict()

    def test_absent_page_stays_absent(self):
        doc = CanonicalDefinition.from_dict({"schemaVersion": "1.0.0"})

        assert doc.page is None
        assert doc.to_dict() == {"schemaVersion": "1.0.0"}

    def test_not_a_mapping(self):
        with pytest.raises(InvalidDefinitionError, match="JSON object"):
            CanonicalDefinition.from_dict(["1.0.0"])

    def test_missing_version(self):
        with pytest.raises(InvalidDefinitionError, match="schemaVersion") as exc_info:
            CanonicalDefinition.from_dict({"page": {}})

        assert exc_info.value.field_name == "schemaVersion"

    def test_malformed_version(self):
        with pytest.raises(InvalidDefinitionError, match="Invalid schema version"):
            CanonicalDefinition.from_dict({"schemaVersion": "one"})

    def test_non_string_checksum(self):
        with pytest.raises(InvalidDefinitionError, match="checksum"):
            CanonicalDefinition.from_dict({"schemaVersion": "1.0.0", "checksum": 12})

    def test_constructor_validates_version(self):
        with pytest.raises(InvalidVersionError):
            CanonicalDefinition("latest")

    def test_frozen(self):
        doc = CanonicalDefinition("1.0.0", {})

        with pytest.raises(dataclasses.FrozenInstanceError):
            doc.schema_version = "2.0.0"  # type: ignore[misc]


class TestMigration:
    """Tests for Migration."""

    def test_label(self):
        assert Migration("0.9.0", "1.0.0", add_field("a", 1)).label == "0.9.0 -> 1.0.0"
        assert Migration("0.9.0", "1.0.0", add_field("a", 1), "flag").label == "0.9.0 -> 1.0.0 (flag)"

    def test_rejects_bad_version(self):
        with pytest.raises(InvalidVersionError):
            Migration("0.9", "1.0.0", add_field("a", 1))

    def test_rejects_non_callable(self):
        with pytest.raises(TypeError, match="transform must be callable"):
            Migration("0.9.0", "1.0.0", "not a function")  # type: ignore[arg-type]


class TestTransforms:
    """Tests for page transform factories."""

    def test_add_field(self):
        doc = CanonicalDefinition("0.9.0", {"title": "Hi"})

        result = add_field("migrated", True)(doc)

        assert result.page == {"title": "Hi", "migrated": True}
        assert doc.page == {"title": "Hi"}

    def test_add_field_to_absent_page(self):
        assert add_field("a", 1)(CanonicalDefinition("0.9.0")).page == {"a": 1}

    def test_add_field_copies_value(self):
        default = {"items": []}
        transform = add_field("config", default)

        first = transform(CanonicalDefinition("0.9.0", {}))
        first.page["config"]["items"].append(1)

        assert default == {"items": []}

    def test_rename_field(self):
        result = rename_field("name", "title")(CanonicalDefinition("0.9.0", {"name": "Hi"}))

        assert result.page == {"title": "Hi"}

    def test_rename_missing_is_noop(self):
        result = rename_field("name", "title")(CanonicalDefinition("0.9.0", {"x": 1}))

        assert result.page == {"x": 1}

    def test_remove_field(self):
        result = remove_field("legacy")(CanonicalDefinition("0.9.0", {"legacy": 1, "x": 2}))

        assert result.page == {"x": 2}

    def test_non_object_page_rejected(self):
        with pytest.raises(TypeError, match="object page"):
            add_field("a", 1)(CanonicalDefinition("0.9.0", [1, 2]))


class TestCanonicalVersionTags:
    """Version fields are stored as MAJOR.MINOR.PATCH."""

    def test_definition_version_normalized(self):
        assert CanonicalDefinition(" v1.2.3 ").schema_version == "1.2.3"

    def test_from_dict_normalizes(self):
        doc = CanonicalDefinition.from_dict({"schemaVersion": "v1.0.0", "page": {}})

        assert doc.to_dict()["schemaVersion"] == "1.0.0"

    def test_migration_versions_normalized(self):
        migration = Migration("v0.9.0", "v1.0.0", add_field("a", 1))

        assert migration.from_version == "0.9.0"
        assert migration.to_version == "1.0.0"
        assert migration.label == "0.9.0 -> 1.0.0"


class TestChecksumField:
    """Falsy non-string checksums are rejected, not dropped."""

    @pytest.mark.parametrize("value", [0, False, [], {}])
    def test_falsy_non_string_rejected(self, value):
        with pytest.raises(InvalidDefinitionError, match="must be a string"):
            CanonicalDefinition.from_dict({"schemaVersion": "1.0.0", "checksum": value})

    def test_null_checksum_is_absent(self):
        doc = CanonicalDefinition.from_dict({"schemaVersion": "1.0.0", "checksum": None})

        assert doc.checksum is None
