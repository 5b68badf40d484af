"""Hierarchy snapshots built from host XML.

This module converts the XML returned by a hierarchy query into a tree of
HierarchyNode objects and provides the read-only helpers the indexer and the
diff detector share: recycle-bin stripping, locating the currently viewed
section, ancestor path labels, and the depth-first walk over the sections
that carry addressable paths.
"""

import dataclasses
import logging
from typing import Iterator, Optional, Tuple

from lxml import etree

from .models import HierarchyNode, NodeKind

logger = logging.getLogger(__name__)

PATH_SEPARATOR = '/'


def _create_node(element: etree._Element, parent: Optional[HierarchyNode]) -> HierarchyNode:
    tag = etree.QName(element).localname
    return HierarchyNode(
        kind=NodeKind.from_tag(tag, is_root=parent is None),
        node_id=element.get('ID', ''),
        name=element.get('name', ''),
        tag=tag,
        is_recycle_bin=element.get('isRecycleBin') == 'true',
        is_in_recycle_bin=element.get('isInRecycleBin') == 'true',
        is_currently_viewed=element.get('isCurrentlyViewed') == 'true',
        path=element.get('path', ''),
        parent=parent,
    )


def build_tree(element: etree._Element) -> HierarchyNode:
    """Build a HierarchyNode tree from a hierarchy element.

    Comments and processing instructions are ignored; child order follows
    document order.

    Args:
        element: Root element of a host hierarchy snapshot

    Returns:
        HierarchyNode: Root of the converted tree
    """
    root = _create_node(element, None)
    stack = [(element, root)]
    while stack:
        source, node = stack.pop()
        for child_element in source:
            if not isinstance(child_element.tag, str):
                continue
            child = _create_node(child_element, node)
            node.children.append(child)
            stack.append((child_element, child))
    return root


def strip_recycle_bin(root: HierarchyNode) -> HierarchyNode:
    """Return a copy of the tree without recycle-bin subtrees.

    Any node flagged as the recycle bin, or as living inside it, is dropped
    together with all of its descendants. The input tree is left untouched.
    """
    copy = dataclasses.replace(root, children=[], parent=None)
    stack = [(root, copy)]
    while stack:
        source, target = stack.pop()
        for child in source.children:
            if child.is_recycled:
                logger.debug(f"Skipping recycle bin {child.kind.value} '{child.name}'")
                continue
            child_copy = dataclasses.replace(child, children=[], parent=target)
            target.children.append(child_copy)
            stack.append((child, child_copy))
    return copy


def find_current_section(root: HierarchyNode) -> Optional[HierarchyNode]:
    """Find the section shown in the current window, if it is in the tree."""
    for node in root.iter_descendants():
        if node.kind is NodeKind.SECTION and node.is_currently_viewed:
            return node
    return None


def ancestor_path(node: HierarchyNode) -> str:
    """Join the names of a node's named ancestors, root first.

    Example:
        >>> ancestor_path(ideas_section)   # Work > Projects > Ideas
        'Work/Projects'
    """
    names = [ancestor.name for ancestor in node.iter_ancestors() if ancestor.name]
    return PATH_SEPARATOR.join(reversed(names))


def join_path(prefix: str, label: str) -> str:
    """Join a root prefix and a path label, skipping an empty prefix."""
    if not prefix:
        return label
    return f"{prefix}{PATH_SEPARATOR}{label}"


def iter_indexable_sections(root: HierarchyNode) -> Iterator[Tuple[HierarchyNode, str]]:
    """Walk the tree and yield (section, path label) pairs in depth-first order.

    The walk uses an explicit stack of (node, inherited label) pairs. Inside
    notebooks, section groups and the workspace, children that are not part of
    an addressable path (unfiled notes, open sections, nested notebook lists)
    and unnamed children are skipped. A section reached without an inherited
    label is labelled with its own name.

    Args:
        root: Traversal root (workspace, notebook, section group or section)

    Yields:
        Tuple of the section node and its path label within the traversal root
    """
    stack = [(root, "")]
    while stack:
        node, label = stack.pop()

        if node.kind is NodeKind.SECTION:
            yield node, label or node.name
            continue

        if not node.kind.is_container:
            continue

        pending = []
        for child in node.children:
            if child.kind is NodeKind.OTHER or not child.name:
                continue
            pending.append((child, join_path(label, child.name)))
        stack.extend(reversed(pending))


def count_indexable_pages(root: HierarchyNode) -> int:
    """Count the pages iter_indexable_sections will reach."""
    return sum(
        len(section.children_of(NodeKind.PAGE))
        for section, _ in iter_indexable_sections(root)
    )
