"""
Definition pipeline: migrate to latest, then stamp the checksum.

This is the hand-off point between an external loader and downstream
consumers (renderers, generators, caches). Everything it returns is at the
latest schema version and carries a checksum of its page.

Invariants:
    - process() output satisfies schema_version == latest_version
    - process() output always carries a freshly computed checksum
    - Errors from migration or serialization propagate unchanged

Example:
    >>> pipeline = DefinitionPipeline(registry, latest_version="1.0.0")
    >>> pipeline.process_dict({"schemaVersion": "0.9.0", "page": {"title": "Hi"}})
    {'schemaVersion': '1.0.0', 'page': {...}, 'checksum': '...'}
"""

from __future__ import annotations

import importlib
import logging
from typing import Any, Optional

from .config import Settings
from .versioning.checksum import ChecksumStamper
from .versioning.engine import LATEST_SCHEMA_VERSION, MigrationEngine
from .versioning.registry import MigrationRegistry
from .versioning.semver import VersionLike
from .versioning.types import CanonicalDefinition, Migration

logger = logging.getLogger(__name__)


class DefinitionPipeline:
    """Composes MigrationEngine and ChecksumStamper.

    Attributes:
        engine: Migration engine over the configured registry
        stamper: Checksum stamper
    """

    def __init__(
        self,
        registry: MigrationRegistry,
        latest_version: VersionLike = LATEST_SCHEMA_VERSION,
    ) -> None:
        self.engine = MigrationEngine(registry, latest_version)
        self.stamper = ChecksumStamper()

    @property
    def latest_version(self) -> str:
        return self.engine.latest_version

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> DefinitionPipeline:
        """Build a pipeline from configuration.

        The registry module's LATEST_SCHEMA_VERSION, when present, overrides
        settings.latest_schema_version.
        """
        settings = settings or Settings()
        registry, latest = load_registry_module(settings.registry_module)
        return cls(registry, latest or settings.latest_schema_version)

    def process(self, definition: CanonicalDefinition) -> CanonicalDefinition:
        """Migrate definition to latest and stamp its checksum."""
        migrated = self.engine.migrate_to_latest(definition)
        return self.stamper.apply(migrated)

    def process_dict(self, raw: Any) -> dict[str, Any]:
        """Wire-level process(): raw document in, raw document out."""
        return self.process(CanonicalDefinition.from_dict(raw)).to_dict()

    def plan(self, definition: CanonicalDefinition) -> list[Migration]:
        return self.engine.plan(definition.schema_version)

    def verify(self, definition: CanonicalDefinition) -> bool:
        return self.stamper.verify(definition)


def load_registry_module(
    module_path: Optional[str],
) -> tuple[MigrationRegistry, Optional[str]]:
    """Load a registry from a Python module.

    The module must expose `registry` or `get_registry()`, and may expose
    LATEST_SCHEMA_VERSION. Unfrozen registries are frozen here.

    Returns:
        Tuple of (registry, latest version or None)
    """
    if not module_path:
        logger.info("No registry module configured; using an empty registry")
        return MigrationRegistry.from_migrations([]), None

    try:
        module = importlib.import_module(module_path)
    except ImportError as e:
        raise ValueError(f"Cannot import registry module {module_path}: {e}") from e
    if hasattr(module, "registry"):
        registry = module.registry
    elif hasattr(module, "get_registry"):
        registry = module.get_registry()
    else:
        raise ValueError(f"Module {module_path} has no 'registry' or 'get_registry()'")

    if not isinstance(registry, MigrationRegistry):
        raise ValueError(
            f"Module {module_path} registry is {type(registry).__name__}, "
            f"expected MigrationRegistry"
        )
    if not registry.frozen:
        registry.freeze()

    latest = getattr(module, "LATEST_SCHEMA_VERSION", None)
    logger.info(
        f"Loaded {len(registry)} migration(s) from {module_path} "
        f"(fingerprint={registry.fingerprint})"
    )
    return registry, latest
