"""Integration tests (pipeline, registry modules, CLI)."""
