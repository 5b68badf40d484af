"""Cross-reference indexer for host page hyperlinks.

There is no direct way to map a host hyperlink back to the page it points to,
and no direct "path of this page" query either. This module walks a scoped
hierarchy snapshot, asks the host for the hyperlink of every page, extracts
the page identity token embedded in the link, and records it together with
the page's location. The walk reports progress per page and honors a
cooperative cancellation token at section and page boundaries.
"""

import logging
import re
from typing import Callable, Optional, Tuple

from ..host_client.api_wrapper import HostAPIWrapper
from ..host_client.models import Scope
from .models import (
    CancellationToken,
    CrossReferenceEntry,
    CrossReferenceIndex,
    HierarchyNode,
    NodeKind,
)
from .snapshot import (
    ancestor_path,
    build_tree,
    count_indexable_pages,
    find_current_section,
    iter_indexable_sections,
    join_path,
    strip_recycle_bin,
)

logger = logging.getLogger(__name__)

# Identity token of a page inside a host hyperlink, e.g. page-id={1A2B...}
PAGE_ID_PATTERN = re.compile(r"page-id=({[^}]+?})")


def _cancelled(token: Optional[CancellationToken]) -> bool:
    return token is not None and token.is_cancellation_requested


class HyperlinkIndexer:
    """Builds an index of page hyperlink tokens within a scope.

    Example:
        >>> indexer = HyperlinkIndexer(api)
        >>> index = indexer.build_index(Scope.SECTIONS, token, on_count, on_step)
        >>> entry = index["{5D2B...}"]
        >>> print(entry.full_path, entry.name)
    """

    def __init__(self, api: HostAPIWrapper):
        """Initialize the indexer.

        Args:
            api: Wrapper used to fetch snapshots and resolve hyperlinks
        """
        self._api = api

    def build_index(
        self,
        scope: Scope,
        token: Optional[CancellationToken] = None,
        on_count: Optional[Callable[[int], None]] = None,
        on_step: Optional[Callable[[], None]] = None
    ) -> CrossReferenceIndex:
        """Map hyperlink identity tokens to page locations within a scope.

        Scope.PAGES indexes the current section, Scope.SECTIONS the current
        notebook and Scope.NOTEBOOKS every open notebook; any other scope
        yields an empty index. Recycle-bin content is never indexed.

        Args:
            scope: Extent of the index
            token: Cancellation token polled before each section and page
            on_count: Called once with the number of pages to visit, only
                when there is at least one
            on_step: Called once per visited page, whether or not its
                hyperlink yielded a token

        Returns:
            Dict keyed by identity token; partial if cancelled
        """
        index: CrossReferenceIndex = {}

        if scope is Scope.NOTEBOOKS:
            container = self._api.get_notebooks(Scope.PAGES)
        elif scope in (Scope.SECTIONS, Scope.PAGES):
            # the whole notebook is fetched even for Pages so the full path can be inferred
            container = self._api.get_notebook(scope=Scope.PAGES)
        else:
            logger.debug(f"Nothing to index for scope {scope.name}")
            return index

        if container is None:
            logger.warning(f"No hierarchy available for scope {scope.name}")
            return index

        snapshot = strip_recycle_bin(build_tree(container))

        if _cancelled(token):
            return index

        root, prefix = self._resolve_root(scope, snapshot)

        if _cancelled(token):
            return index

        total = count_indexable_pages(root)
        if total == 0:
            logger.info(f"No pages to index in scope {scope.name}")
            return index

        if on_count is not None:
            on_count(total)

        logger.info(f"Indexing {total} pages in scope {scope.name} under '{prefix}'")

        for section, path in iter_indexable_sections(root):
            if _cancelled(token):
                break

            full_path = join_path(prefix, path)
            for page in section.children_of(NodeKind.PAGE):
                if _cancelled(token):
                    logger.info(f"Indexing cancelled after {len(index)} entries")
                    return index

                self._index_page(index, page, path, full_path)

                if on_step is not None:
                    on_step()

        logger.info(f"Indexed {len(index)} of {total} pages")
        return index

    def _resolve_root(self, scope: Scope, snapshot: HierarchyNode) -> Tuple[HierarchyNode, str]:
        """Pick the traversal root and the path prefix of its ancestors.

        For Scope.PAGES the root narrows to the currently viewed section and
        the prefix is the chain of its named ancestors. For other scopes the
        root is the snapshot and the prefix is its name (the workspace root
        has none).
        """
        if scope is Scope.PAGES:
            section = find_current_section(snapshot)
            if section is None:
                logger.warning("Current section not found in notebook, indexing whole notebook")
                return snapshot, snapshot.name
            return section, ancestor_path(section)

        if scope is Scope.NOTEBOOKS:
            return snapshot, ""

        return snapshot, snapshot.name

    def _index_page(
        self,
        index: CrossReferenceIndex,
        page: HierarchyNode,
        path: str,
        full_path: str
    ) -> None:
        link = self._api.get_hyperlink(page.node_id)
        match = PAGE_ID_PATTERN.search(link) if link else None
        if match is None:
            logger.debug(f"No page token in hyperlink of page {page.node_id} ('{page.name}')")
            return

        hyper_id = match.group(1)
        if hyper_id in index:
            logger.warning(
                f"Duplicate page token {hyper_id} for page {page.node_id}, "
                f"already mapped to page {index[hyper_id].page_id}"
            )
            return

        index[hyper_id] = CrossReferenceEntry(
            page_id=page.node_id,
            section_id=None,
            hyper_id=hyper_id,
            name=page.name,
            path=path,
            full_path=full_path,
            uri=link,
        )
