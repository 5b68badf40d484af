"""Contract of the host application.

HostApplication is the narrow, stateful surface the bridge consumes. Concrete
implementations adapt a transport (an automation bridge, an RPC proxy, an
in-memory fake for tests) to these methods. Every call is serialized against a
single external actor and may raise an exception carrying a ``hresult`` or
``status_code`` attribute; a busy host is reported that way rather than by
blocking.
"""

from abc import ABC, abstractmethod
from typing import Optional


class HostApplication(ABC):
    """Abstract host application consumed by HostAPIWrapper."""

    @property
    @abstractmethod
    def current_notebook_id(self) -> Optional[str]:
        """ID of the notebook shown in the current window."""

    @property
    @abstractmethod
    def current_section_id(self) -> Optional[str]:
        """ID of the section shown in the current window."""

    @property
    @abstractmethod
    def current_page_id(self) -> Optional[str]:
        """ID of the page shown in the current window."""

    @abstractmethod
    def get_hierarchy(self, node_id: str, scope: int) -> str:
        """Return hierarchy XML rooted at node_id ("" for all notebooks)."""

    @abstractmethod
    def get_hyperlink_to_object(self, object_id: str, sub_object_id: str) -> str:
        """Return a link string embedding the identity token of object_id."""

    @abstractmethod
    def update_hierarchy(self, xml: str) -> None:
        """Apply a structural edit to a notebook or section group."""

    @abstractmethod
    def create_new_page(self, section_id: str) -> str:
        """Create a page in section_id and return its ID."""

    @abstractmethod
    def get_page_content(self, page_id: str, detail: int) -> str:
        """Return page XML."""

    @abstractmethod
    def update_page_content(self, xml: str) -> None:
        """Replace page content with the given XML."""

    @abstractmethod
    def get_hierarchy_parent(self, object_id: str) -> str:
        """Return the ID of the object owning object_id."""

    @abstractmethod
    def delete_page_content(self, page_id: str, object_id: str) -> None:
        """Remove an object from a page."""

    @abstractmethod
    def delete_hierarchy(self, object_id: str) -> None:
        """Remove a hierarchy object."""

    @abstractmethod
    def sync_hierarchy(self, node_id: str) -> None:
        """Flush pending changes of node_id to storage."""

    @abstractmethod
    def open_hierarchy(self, path: str) -> str:
        """Open a section file and return the ID of the opened section."""

    @abstractmethod
    def merge_sections(self, source_id: str, target_id: str) -> None:
        """Merge the pages of source_id into target_id."""

    @abstractmethod
    def navigate_to(self, object_id: str) -> None:
        """Show the given hierarchy object."""

    @abstractmethod
    def navigate_to_url(self, url: str) -> None:
        """Show the object addressed by a host or web URL."""

    @abstractmethod
    def publish(self, page_id: str, path: str, export_format: int) -> None:
        """Export a page to a file."""

    @abstractmethod
    def find_pages(self, node_id: str, query: str) -> str:
        """Return hierarchy XML of pages under node_id matching query."""

    @abstractmethod
    def find_meta(self, node_id: str, name: str) -> str:
        """Return hierarchy XML of objects under node_id carrying meta name."""

    @abstractmethod
    def get_special_location(self, location: int) -> str:
        """Return the path of a special folder."""
