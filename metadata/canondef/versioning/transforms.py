"""
Factories for common page transforms.

Each factory returns a pure function over CanonicalDefinition suitable
for Migration.transform. They only touch the top level of an object page;
anything structural belongs in a hand-written transform.
"""

from __future__ import annotations

import copy
import dataclasses
from typing import Any

from .types import CanonicalDefinition, Transform


def _page_dict(definition: CanonicalDefinition) -> dict[str, Any]:
    page = definition.page
    if page is None:
        return {}
    if not isinstance(page, dict):
        raise TypeError(
            f"Page transform needs an object page, got {type(page).__name__}"
        )
    return dict(page)


def add_field(name: str, value: Any) -> Transform:
    """Set page[name] = value (overwrites an existing value).

    Example:
        >>> Migration("0.9.0", "1.0.0", add_field("migrated", True))
    """

    def transform(definition: CanonicalDefinition) -> CanonicalDefinition:
        page = _page_dict(definition)
        page[name] = copy.deepcopy(value)
        return dataclasses.replace(definition, page=page)

    transform.__name__ = f"add_field_{name}"
    return transform


def rename_field(old: str, new: str) -> Transform:
    """Move page[old] to page[new]; no-op when old is absent."""

    def transform(definition: CanonicalDefinition) -> CanonicalDefinition:
        page = _page_dict(definition)
        if old in page:
            page[new] = page.pop(old)
        return dataclasses.replace(definition, page=page)

    transform.__name__ = f"rename_field_{old}_{new}"
    return transform


def remove_field(name: str) -> Transform:
    """Drop page[name] if present."""

    def transform(definition: CanonicalDefinition) -> CanonicalDefinition:
        page = _page_dict(definition)
        page.pop(name, None)
        return dataclasses.replace(definition, page=page)

    transform.__name__ = f"remove_field_{name}"
    return transform
