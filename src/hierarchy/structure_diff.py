"""Structural diff detection of host-created objects.

Some host mutations create a child object without returning its ID. The
detector captures the IDs of a container's children before the mutation,
re-reads the container afterwards and takes the set difference to identify
the new child.

The technique assumes nobody else mutates the container between the two
reads; the host offers no way to guard against that, so a concurrent external
change can be reported as the new object. When a mutation adds more than one
child only the first one in document order is returned.
"""

import logging
from typing import Iterable, List, Optional, Set

from lxml import etree

from ..host_client.api_wrapper import HostAPIWrapper
from ..host_client.models import Scope
from .models import HierarchyNode, NodeKind
from .snapshot import build_tree

logger = logging.getLogger(__name__)


def child_id_set(node: HierarchyNode, kind: NodeKind = NodeKind.SECTION) -> Set[str]:
    """IDs of the direct children of a kind, ignoring recycle-bin children."""
    return {
        child.node_id for child in node.children
        if child.kind is kind and not child.is_recycled and child.node_id
    }


def child_ids(node: HierarchyNode, kind: NodeKind = NodeKind.SECTION) -> List[str]:
    """Like child_id_set but in document order."""
    return [
        child.node_id for child in node.children
        if child.kind is kind and not child.is_recycled and child.node_id
    ]


def descendant_ids(node: HierarchyNode, kind: NodeKind = NodeKind.PAGE) -> List[str]:
    """IDs of all descendants of a kind in document order."""
    return [
        descendant.node_id for descendant in node.iter_descendants()
        if descendant.kind is kind and not descendant.is_recycled and descendant.node_id
    ]


def find_new_id(before: Set[str], after: Iterable[str]) -> Optional[str]:
    """Return the first ID of after that is not in before.

    Args:
        before: IDs captured before the mutation
        after: IDs read after the mutation, in document order

    Returns:
        The new ID, or None if nothing was added
    """
    new_ids: List[str] = []
    for object_id in after:
        if object_id not in before and object_id not in new_ids:
            new_ids.append(object_id)

    if not new_ids:
        return None

    if len(new_ids) > 1:
        logger.warning(
            f"Found {len(new_ids)} new objects after mutation, "
            f"using the first one ({new_ids[0]})"
        )
    return new_ids[0]


class StructureDiffDetector:
    """Creates hierarchy objects and discovers their IDs by diffing snapshots.

    Example:
        >>> detector = StructureDiffDetector(api)
        >>> section = detector.create_section("Ideas")
        >>> page_id = detector.import_section("C:/exports/Ideas.one")
    """

    def __init__(self, api: HostAPIWrapper):
        self._api = api

    def create_section(self, name: str) -> Optional[HierarchyNode]:
        """Create a section right after the current one in the current notebook.

        The new section goes into the parent of the currently viewed section
        (the notebook or a section group), which is the only container
        submitted back to the host. If no section is viewed the section is
        appended to the notebook.

        Args:
            name: Name of the new section

        Returns:
            HierarchyNode of the new section, or None if it cannot be identified
        """
        notebook = self._api.get_notebook(scope=Scope.SECTIONS)
        if notebook is None:
            logger.warning("No current notebook, cannot create section")
            return None

        namespace = etree.QName(notebook).namespace
        section_tag = etree.QName(namespace, NodeKind.SECTION.value).text

        current = None
        for element in notebook.iter(section_tag):
            if element.get('isCurrentlyViewed') == 'true':
                current = element
                break

        parent = notebook if current is None else current.getparent()
        before = child_id_set(build_tree(parent))

        section = etree.SubElement(parent, section_tag, name=name)
        if current is not None:
            current.addnext(section)

        if not self._api.update_hierarchy(parent):
            return None

        parent_id = parent.get('ID')
        refreshed = self._api.get_hierarchy(parent_id, Scope.SECTIONS)
        if refreshed is None:
            logger.warning(f"Cannot re-read {parent_id} after creating section '{name}'")
            return None

        tree = build_tree(refreshed)
        new_id = find_new_id(before, child_ids(tree))
        if new_id is None:
            logger.warning(f"New section '{name}' not found under {parent_id}")
            return None

        logger.info(f"Created section '{name}' ({new_id}) under {parent_id}")
        return next(child for child in tree.children if child.node_id == new_id)

    def import_section(self, path: str) -> Optional[str]:
        """Import a section file and merge its pages into the current section.

        Opening a section file places it in the host's transient open-sections
        area without loading its pages; merging it into the current section
        forces the pages to load.

        Args:
            path: Location of the section file

        Returns:
            ID of the newly added page, or None
        """
        section_id = self._api.current_section_id
        start = self._api.get_section(section_id)
        if start is None:
            logger.warning("No current section, cannot import")
            return None

        before = set(descendant_ids(build_tree(start)))

        open_section_id = self._api.open_hierarchy(path)
        if not open_section_id:
            logger.warning(f"Host did not open {path}")
            return None

        if not self._api.merge_sections(open_section_id, section_id):
            return None

        section = self._api.get_section(section_id)
        if section is None:
            logger.warning(f"Cannot re-read section {section_id} after import")
            return None

        page_id = find_new_id(before, descendant_ids(build_tree(section)))
        if page_id is not None:
            logger.info(f"Imported {path} as page {page_id}")
        return page_id
