"""Submission of page content to the host."""

import logging

from lxml import etree

from ..host_client.api_wrapper import HostAPIWrapper, to_xml
from .schema_validator import SchemaValidator

logger = logging.getLogger(__name__)


class PageUpdater:
    """Validates whole pages before handing their XML to the host.

    Elements other than a Page root (e.g. a single outline with its own
    object ID) are submitted as they are.
    """

    def __init__(self, api: HostAPIWrapper, validator: SchemaValidator):
        self._api = api
        self._validator = validator

    def update(self, element: etree._Element) -> bool:
        """Update a page, or an element within a page with a unique object ID.

        Returns:
            True if the host accepted the update; False if the page failed
            validation (nothing is submitted) or the host call was abandoned
        """
        if etree.QName(element).localname == 'Page':
            result = self._validator.validate(element)
            if not result.valid:
                logger.warning(
                    f"Page {element.get('ID', '?')} failed schema validation "
                    f"({len(result.errors)} errors), update withheld"
                )
                return False
            element = result.content

        return self._api.update_page_content(to_xml(element))
