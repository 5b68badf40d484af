"""Data models for the hierarchy walker.

This module defines the data models used by the hierarchy library.
All models use dataclasses for clean, type-safe data structures.
"""

import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, List, Optional


class NodeKind(Enum):
    """Kind of a node in the host hierarchy, named after its element tag.

    OTHER covers containers that are not part of an addressable path, such as
    unfiled notes, open sections, or a nested notebooks list.
    """
    WORKSPACE = "Notebooks"
    NOTEBOOK = "Notebook"
    SECTION_GROUP = "SectionGroup"
    SECTION = "Section"
    PAGE = "Page"
    OTHER = "Other"

    @classmethod
    def from_tag(cls, tag: str, is_root: bool = False) -> 'NodeKind':
        """Map an element local name to a NodeKind.

        A Notebooks element is the workspace only at the root of a snapshot.
        """
        if tag == cls.WORKSPACE.value:
            return cls.WORKSPACE if is_root else cls.OTHER
        for kind in (cls.NOTEBOOK, cls.SECTION_GROUP, cls.SECTION, cls.PAGE):
            if tag == kind.value:
                return kind
        return cls.OTHER

    @property
    def is_container(self) -> bool:
        return self in (NodeKind.WORKSPACE, NodeKind.NOTEBOOK, NodeKind.SECTION_GROUP)


@dataclass
class HierarchyNode:
    """Represents a node in a host hierarchy snapshot.

    Built fresh from host XML for each operation. The parent back-reference
    is excluded from comparison and repr.

    Attributes:
        kind: Kind of the node
        node_id: Opaque host ID (empty for the workspace root)
        name: Display name (empty when the host provides none)
        tag: Local name of the source element
        is_recycle_bin: Node is the recycle bin itself
        is_in_recycle_bin: Node lives inside the recycle bin
        is_currently_viewed: Node is shown in the current window
        path: File location reported by the host (sections and notebooks)
        children: Ordered child nodes
        parent: Parent node (None at the root)
    """
    kind: NodeKind
    node_id: str = ""
    name: str = ""
    tag: str = ""
    is_recycle_bin: bool = False
    is_in_recycle_bin: bool = False
    is_currently_viewed: bool = False
    path: str = ""
    children: List['HierarchyNode'] = field(default_factory=list)
    parent: Optional['HierarchyNode'] = field(default=None, compare=False, repr=False)

    @property
    def is_recycled(self) -> bool:
        return self.is_recycle_bin or self.is_in_recycle_bin

    def children_of(self, kind: NodeKind) -> List['HierarchyNode']:
        return [child for child in self.children if child.kind is kind]

    def iter_descendants(self) -> Iterator['HierarchyNode']:
        """Yield every descendant in depth-first, document order."""
        stack = list(reversed(self.children))
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def iter_ancestors(self) -> Iterator['HierarchyNode']:
        """Yield the parent chain, nearest first."""
        node = self.parent
        while node is not None:
            yield node
            node = node.parent


@dataclass(frozen=True)
class CrossReferenceEntry:
    """Location metadata of a page, keyed by its hyperlink identity token.

    Attributes:
        page_id: Host ID of the page
        section_id: Host ID of the section (None when not resolved)
        hyper_id: Identity token extracted from the link string
        name: Page name
        path: Path relative to the requested scope (section, notebook)
        full_path: Root-qualified path of the owning section
        uri: Raw link string returned by the host
    """
    page_id: str
    section_id: Optional[str]
    hyper_id: str
    name: str
    path: str
    full_path: str
    uri: str


# Identity token -> entry
CrossReferenceIndex = Dict[str, CrossReferenceEntry]


class CancellationToken:
    """Cooperative cancellation flag polled at traversal boundaries.

    Backed by threading.Event so it can be set from a signal handler or
    another thread.

    Example:
        >>> token = CancellationToken()
        >>> token.cancel()
        >>> token.is_cancellation_requested
        True
    """

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def is_cancellation_requested(self) -> bool:
        return self._event.is_set()
