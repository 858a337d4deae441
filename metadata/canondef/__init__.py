"""
canondef - Versioning and integrity pipeline for canonical page definitions.

This package advances persisted definitions to the latest schema version
and fingerprints the result:

    ┌─────────────┐     ┌─────────────────┐     ┌─────────────────┐
    │   Loader    │────▶│ MigrationEngine │────▶│ ChecksumStamper │
    │ (external)  │     │  (registry walk)│     │   (SHA-256)     │
    └─────────────┘     └─────────────────┘     └────────┬────────┘
                                                         │
                                                         ▼
                                        ┌─────────────────────────────┐
                                        │ Renderers / generators /    │
                                        │ caches (external)           │
                                        └─────────────────────────────┘

Invariants:
    - Output is at LATEST_SCHEMA_VERSION and carries a checksum, or an
      error is raised
    - The checksum depends only on the page, never on key order
    - Migration registries are frozen before documents flow

How to change safely:
    - Migrations are append-only; ship a new edge instead of editing one
    - Bump the latest version only together with the edge that reaches it

Version: see _version.py.
"""

from ._version import __version__

__all__ = ["__version__"]
