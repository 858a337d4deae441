"""
Command-line tools for canonical definitions.

- definition_cli: migrate, checksum, verify, plan, check-registry
"""
