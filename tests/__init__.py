"""
canondef Test Suite.

This package contains:
- unit/: Unit tests (no external dependencies)
- integration/: Integration tests (pipeline, registry modules, CLI)
"""
