"""API wrapper for the host application.

This module wraps a HostApplication and provides error translation from raw
host exceptions to our typed exception hierarchy, XML parsing of hierarchy
and page responses with lxml, and the best-effort retry policy for every
call. Callers never see host errors raised from this layer: failed reads
return None and failed mutations return False, with a log entry explaining
why.
"""

import logging
import posixpath
from pathlib import Path
from typing import Callable, Optional, TypeVar

from lxml import etree

from .application import HostApplication
from .errors import HostBusyError, HostError
from .models import ExportFormat, HostFolders, ItemInfo, PageDetail, Scope, SpecialLocation
from .retry_logic import (
    DEFAULT_POLICY,
    ErrorClass,
    RetryPolicy,
    classify_host_error,
    invoke_with_retry,
    status_code_of,
)

logger = logging.getLogger(__name__)

T = TypeVar('T')

# Entities and network access are never resolved in host responses
_PARSER = etree.XMLParser(remove_blank_text=True, resolve_entities=False, no_network=True)


class MalformedResponseError(HostError):
    """Raised when the host returns XML that cannot be parsed."""

    def __init__(self, operation: str, reason: str):
        super().__init__(None, operation, f"malformed XML: {reason}")


def parse_xml(xml: str, operation: str = "parse") -> etree._Element:
    """Parse host XML into an element.

    Raises:
        MalformedResponseError: If the XML is not well-formed
    """
    try:
        return etree.fromstring(xml.encode('utf-8'), _PARSER)
    except etree.XMLSyntaxError as e:
        raise MalformedResponseError(operation, str(e)) from e


def to_xml(element: etree._Element) -> str:
    """Serialize an element without formatting, as the host expects."""
    return etree.tostring(element, encoding='unicode')


class HostAPIWrapper:
    """Wrapper around a HostApplication with error translation and retry.

    This class provides a thin wrapper over the host that:
    1. Translates raw host exceptions to HostError / HostBusyError
    2. Retries busy failures with linear backoff (RetryPolicy)
    3. Parses hierarchy and page XML into lxml elements
    4. Logs and absorbs permanent failures

    Example:
        >>> api = HostAPIWrapper(app)
        >>> notebook = api.get_notebook(scope=Scope.PAGES)
    """

    def __init__(self, application: HostApplication, policy: Optional[RetryPolicy] = None):
        """Initialize the wrapper.

        Args:
            application: The host application to call into
            policy: Retry policy (defaults to 3 attempts, 250ms base delay)
        """
        self._app = application
        self._policy = policy or DEFAULT_POLICY

    @property
    def policy(self) -> RetryPolicy:
        return self._policy

    # ------------------------------------------------------------------
    # Plumbing

    def _translate_error(self, exception: Exception, operation: str) -> HostError:
        """Translate a raw host exception to a typed HostError.

        Args:
            exception: The original exception from the host
            operation: Description of the host call that failed

        Returns:
            HostBusyError for transient codes, HostError otherwise
        """
        code = status_code_of(exception)
        if classify_host_error(exception, self._policy.busy_codes) is ErrorClass.TRANSIENT:
            return HostBusyError(code, operation)
        return HostError(code, operation, str(exception) or type(exception).__name__)

    def _call(self, operation: str, func: Callable[[], T]) -> T:
        try:
            return func()
        except HostError:
            raise
        except Exception as e:
            raise self._translate_error(e, operation) from e

    def _query(self, operation: str, func: Callable[[], T]) -> Optional[T]:
        """Run a read through the retry invoker; None when abandoned."""
        return invoke_with_retry(
            lambda: self._call(operation, func),
            policy=self._policy,
            description=operation
        )

    def _mutate(self, operation: str, func: Callable[[], None]) -> bool:
        """Run a mutation through the retry invoker; False when abandoned."""
        def work() -> bool:
            self._call(operation, func)
            return True

        return bool(invoke_with_retry(work, policy=self._policy, description=operation))

    def _query_xml(self, operation: str, func: Callable[[], str]) -> Optional[etree._Element]:
        def work() -> Optional[etree._Element]:
            xml = self._call(operation, func)
            if not xml:
                return None
            return parse_xml(xml, operation)

        return invoke_with_retry(work, policy=self._policy, description=operation)

    # ------------------------------------------------------------------
    # Current window

    @property
    def current_notebook_id(self) -> Optional[str]:
        """Gets the currently viewed notebook ID, or None when abandoned."""
        return self._query("current_notebook_id", lambda: self._app.current_notebook_id)

    @property
    def current_section_id(self) -> Optional[str]:
        """Gets the currently viewed section ID, or None when abandoned."""
        return self._query("current_section_id", lambda: self._app.current_section_id)

    @property
    def current_page_id(self) -> Optional[str]:
        """Gets the currently viewed page ID, or None when abandoned."""
        return self._query("current_page_id", lambda: self._app.current_page_id)

    # ------------------------------------------------------------------
    # Hierarchy reads

    def get_hierarchy(self, node_id: str, scope: Scope) -> Optional[etree._Element]:
        """Fetch the hierarchy rooted at node_id down to scope.

        Args:
            node_id: Hierarchy object ID, or "" for the workspace root
            scope: Depth of the returned hierarchy

        Returns:
            Root element of the snapshot, or None if unavailable
        """
        return self._query_xml(
            f"get_hierarchy({node_id or 'root'}, {scope.name})",
            lambda: self._app.get_hierarchy(node_id, int(scope))
        )

    def get_notebook(
        self,
        notebook_id: Optional[str] = None,
        scope: Scope = Scope.SECTIONS
    ) -> Optional[etree._Element]:
        """Get a notebook (the current one by default) with its hierarchy.

        Returns:
            A Notebook element, or None if notebook_id is unset
        """
        notebook_id = notebook_id or self.current_notebook_id
        if not notebook_id:
            return None
        return self.get_hierarchy(notebook_id, scope)

    def get_notebooks(self, scope: Scope = Scope.NOTEBOOKS) -> Optional[etree._Element]:
        """Get the root Notebooks element containing every open notebook."""
        return self.get_hierarchy("", scope)

    def get_section(self, section_id: Optional[str] = None) -> Optional[etree._Element]:
        """Get a section (the current one by default) with its pages."""
        section_id = section_id or self.current_section_id
        if not section_id:
            return None
        return self.get_hierarchy(section_id, Scope.PAGES)

    def get_parent(self, object_id: str) -> Optional[str]:
        """Get the ID of the hierarchy object owning object_id.

        Returns:
            The parent ID, or None if not found (e.g. parent of a notebook)
        """
        return self._query(
            f"get_hierarchy_parent({object_id})",
            lambda: self._app.get_hierarchy_parent(object_id)
        ) or None

    def get_hyperlink(self, object_id: str, sub_object_id: str = "") -> Optional[str]:
        """Get a link string to an object, or to the page itself when sub_object_id is empty."""
        return self._query(
            f"get_hyperlink_to_object({object_id})",
            lambda: self._app.get_hyperlink_to_object(object_id, sub_object_id)
        ) or None

    def get_folders(self) -> HostFolders:
        """Get the special folders used by the host; for diagnostic logging."""
        def location(kind: SpecialLocation) -> Optional[str]:
            return self._query(
                f"get_special_location({kind.name})",
                lambda: self._app.get_special_location(int(kind))
            )

        return HostFolders(
            backup_folder=location(SpecialLocation.BACKUP_FOLDER),
            default_folder=location(SpecialLocation.DEFAULT_NOTEBOOK_FOLDER),
            unfiled_folder=location(SpecialLocation.UNFILED_NOTES_SECTION),
        )

    # ------------------------------------------------------------------
    # Pages

    def get_page(
        self,
        page_id: Optional[str] = None,
        detail: PageDetail = PageDetail.ALL
    ) -> Optional[etree._Element]:
        """Get the content of a page (the current one by default)."""
        page_id = page_id or self.current_page_id
        if not page_id:
            return None
        return self._query_xml(
            f"get_page_content({page_id})",
            lambda: self._app.get_page_content(page_id, int(detail))
        )

    def get_page_xml(self, page_id: str, detail: PageDetail = PageDetail.BASIC) -> Optional[str]:
        """Get the raw XML of a page."""
        if not page_id:
            return None
        return self._query(
            f"get_page_content({page_id})",
            lambda: self._app.get_page_content(page_id, int(detail))
        ) or None

    def get_page_info(self, page_id: Optional[str] = None) -> ItemInfo:
        """Get the name, file-style path and hyperlink of a page; used for favorites."""
        page = self.get_page(page_id, PageDetail.BASIC)
        if page is None:
            return ItemInfo(None, None, None)

        name = page.get('name')
        page_id = page.get('ID')

        path = None
        section_id = self.get_parent(page_id) or self.current_section_id
        section = self.get_section(section_id)
        if section is not None:
            location = section.get('path')
            if location:
                folder, stem = _folder_and_stem(location)
                path = '/' + posixpath.join(folder, stem, name or '')

        return ItemInfo(name, path, self.get_hyperlink(page_id))

    def get_section_info(self) -> ItemInfo:
        """Get the name, file-style path and hyperlink of the current section."""
        section = self.get_section()
        if section is None:
            return ItemInfo(None, None, None)

        path = section.get('path')
        if path:
            folder, stem = _folder_and_stem(path)
            path = '/' + posixpath.join(folder, stem)

        link = None
        section_id = section.get('ID')
        if section_id:
            link = self.get_hyperlink(section_id)

        return ItemInfo(section.get('name'), path, link)

    def create_page(self, section_id: str) -> Optional[str]:
        """Create a new page in the given section and return its ID."""
        return self._query(
            f"create_new_page({section_id})",
            lambda: self._app.create_new_page(section_id)
        ) or None

    def update_page_content(self, xml: str) -> bool:
        """Submit page XML to the host."""
        return self._mutate("update_page_content", lambda: self._app.update_page_content(xml))

    def delete_content(self, page_id: str, object_id: str) -> bool:
        """Delete the given object from the specified page."""
        return self._mutate(
            f"delete_page_content({page_id}, {object_id})",
            lambda: self._app.delete_page_content(page_id, object_id)
        )

    # ------------------------------------------------------------------
    # Hierarchy mutations

    def update_hierarchy(self, element: etree._Element) -> bool:
        """Apply a structural edit to a notebook or section group; used for sorting and inserting."""
        xml = to_xml(element)
        ok = self._mutate(
            f"update_hierarchy({element.get('ID', '?')})",
            lambda: self._app.update_hierarchy(xml)
        )
        if not ok:
            logger.debug(f"Rejected hierarchy XML: {xml}")
        return ok

    def delete_hierarchy(self, object_id: str) -> bool:
        """Delete the given object from the hierarchy; used for merging."""
        return self._mutate(
            f"delete_hierarchy({object_id})",
            lambda: self._app.delete_hierarchy(object_id)
        )

    def sync(self, node_id: Optional[str] = None) -> bool:
        """Sync pending updates of a notebook (the current one by default) to storage."""
        node_id = node_id or self.current_notebook_id
        return self._mutate(
            f"sync_hierarchy({node_id})",
            lambda: self._app.sync_hierarchy(node_id)
        )

    def open_hierarchy(self, path: str) -> Optional[str]:
        """Open a section file; returns the ID of the transient open section."""
        return self._query(
            f"open_hierarchy({path})",
            lambda: self._app.open_hierarchy(path)
        ) or None

    def merge_sections(self, source_id: str, target_id: str) -> bool:
        """Merge the pages of one section into another."""
        return self._mutate(
            f"merge_sections({source_id}, {target_id})",
            lambda: self._app.merge_sections(source_id, target_id)
        )

    # ------------------------------------------------------------------
    # Utilities

    def navigate_to(self, uri: str) -> bool:
        """Jump to a hierarchy object ID, a host link, or a web URL."""
        if uri.startswith('onenote:') or uri.startswith('http'):
            return self._mutate(f"navigate_to_url({uri})", lambda: self._app.navigate_to_url(uri))
        return self._mutate(f"navigate_to({uri})", lambda: self._app.navigate_to(uri))

    def export(self, page_id: str, path: str, export_format: ExportFormat) -> bool:
        """Export a page to a file in the given format.

        ExportFormat.XML is written locally from the page content; every
        other format is published by the host.
        """
        if export_format is ExportFormat.XML:
            xml = self.get_page_xml(page_id, PageDetail.ALL)
            if xml is None:
                return False
            try:
                Path(path).write_text(xml, encoding='utf-8')
            except OSError as e:
                logger.error(f"Cannot write page {page_id} to {path}: {e}")
                return False
            return True

        return self._mutate(
            f"publish({page_id}, {export_format.name})",
            lambda: self._app.publish(page_id, path, int(export_format))
        )

    def search(self, node_id: str, query: str) -> Optional[etree._Element]:
        """Search pages under a hierarchy node."""
        return self._query_xml(
            f"find_pages({node_id})",
            lambda: self._app.find_pages(node_id, query)
        )

    def search_meta(self, node_id: str, name: str) -> Optional[etree._Element]:
        """Search a hierarchy node for objects carrying the named meta tag."""
        return self._query_xml(
            f"find_meta({node_id}, {name})",
            lambda: self._app.find_meta(node_id, name)
        )


def _folder_and_stem(location: str):
    """Split a host file location into (containing folder name, file stem)."""
    location = location.replace('\\', '/').rstrip('/')
    folder = posixpath.basename(posixpath.dirname(location))
    stem = posixpath.splitext(posixpath.basename(location))[0]
    return folder, stem
