"""Enumerations shared with the host application.

The integer values match the ones the host expects on the wire so they can
be passed straight through to a HostApplication implementation.
"""

from enum import IntEnum
from typing import NamedTuple, Optional


class Scope(IntEnum):
    """Depth of the hierarchy returned by a hierarchy query."""
    SELF = 0
    CHILDREN = 1
    NOTEBOOKS = 2
    SECTIONS = 3
    PAGES = 4


class PageDetail(IntEnum):
    """Verbosity of page content returned by the host."""
    BASIC = 0
    BINARY_DATA = 1
    SELECTION = 2
    BINARY_DATA_SELECTION = 3
    FILE_TYPE = 4
    BINARY_DATA_FILE_TYPE = 5
    SELECTION_FILE_TYPE = 6
    ALL = 7


class ExportFormat(IntEnum):
    """Publish formats supported by the host.

    XML is not a host format; it is handled locally by writing page content.
    """
    ONENOTE = 0
    ONENOTE_2007 = 1
    ONENOTE_PACKAGE = 2
    MHTML = 3
    PDF = 4
    XPS = 5
    WORD = 6
    EMF = 7
    HTML = 8
    XML = 1000


class SpecialLocation(IntEnum):
    """Well-known folders reported by the host."""
    BACKUP_FOLDER = 0
    UNFILED_NOTES_SECTION = 1
    DEFAULT_NOTEBOOK_FOLDER = 2


class ItemInfo(NamedTuple):
    """Name, file-style path and hyperlink of a page or section.

    Used to build favorites; every field is None when the item is unknown.
    """
    name: Optional[str]
    path: Optional[str]
    link: Optional[str]


class HostFolders(NamedTuple):
    """Special folders used for diagnostic logging."""
    backup_folder: Optional[str]
    default_folder: Optional[str]
    unfiled_folder: Optional[str]
