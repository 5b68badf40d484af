"""Hierarchy library for the notebook bridge.

This package turns host hierarchy snapshots into HierarchyNode trees, builds
cross-reference indexes of page hyperlinks, and discovers the IDs of objects
the host creates without reporting them.
"""

from .models import (
    NodeKind,
    HierarchyNode,
    CrossReferenceEntry,
    CrossReferenceIndex,
    CancellationToken,
)
from .snapshot import (
    build_tree,
    strip_recycle_bin,
    find_current_section,
    ancestor_path,
    iter_indexable_sections,
    count_indexable_pages,
)
from .hyperlink_indexer import HyperlinkIndexer, PAGE_ID_PATTERN
from .structure_diff import StructureDiffDetector, find_new_id, child_id_set, descendant_ids

__all__ = [
    'NodeKind',
    'HierarchyNode',
    'CrossReferenceEntry',
    'CrossReferenceIndex',
    'CancellationToken',
    'build_tree',
    'strip_recycle_bin',
    'find_current_section',
    'ancestor_path',
    'iter_indexable_sections',
    'count_indexable_pages',
    'HyperlinkIndexer',
    'PAGE_ID_PATTERN',
    'StructureDiffDetector',
    'find_new_id',
    'child_id_set',
    'descendant_ids',
]
