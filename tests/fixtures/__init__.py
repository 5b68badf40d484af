"""Test fixtures for notebook bridge tests.

This module provides test fixtures for:
- Host hierarchy snapshots (notebooks, section groups, recycle bin)
- Host hyperlinks embedding page identity tokens
- Page content and a minimal page schema
"""

from .hierarchy_fixtures import (
    NS,
    hyperlink,
    NOTEBOOK_WORK,
    WORK_HYPERLINKS,
    NOTEBOOK_NESTED,
    NESTED_HYPERLINKS,
    NESTED_PAGE_ORDER,
    WORKSPACE,
    WORKSPACE_HYPERLINKS,
    EMPTY_NOTEBOOK,
    SECTIONS_BEFORE,
    SECTIONS_AFTER,
    SECTION_BEFORE_IMPORT,
    SECTION_AFTER_IMPORT,
    PAGE_BASIC,
    PAGE_SCHEMA,
    page_with_position,
)

__all__ = [
    "NS",
    "hyperlink",
    "NOTEBOOK_WORK",
    "WORK_HYPERLINKS",
    "NOTEBOOK_NESTED",
    "NESTED_HYPERLINKS",
    "NESTED_PAGE_ORDER",
    "WORKSPACE",
    "WORKSPACE_HYPERLINKS",
    "EMPTY_NOTEBOOK",
    "SECTIONS_BEFORE",
    "SECTIONS_AFTER",
    "SECTION_BEFORE_IMPORT",
    "SECTION_AFTER_IMPORT",
    "PAGE_BASIC",
    "PAGE_SCHEMA",
    "page_with_position",
]
