"""Unit tests for content.page_updater module."""

import pytest
from unittest.mock import Mock

from src.content.page_updater import PageUpdater
from src.content.schema_validator import SchemaValidator
from src.host_client.api_wrapper import HostAPIWrapper, parse_xml
from tests.fixtures.hierarchy_fixtures import NS, PAGE_SCHEMA, page_with_position
from tests.helpers.fake_host import FakeHost, HostCallError


@pytest.fixture
def validator(tmp_path):
    path = tmp_path / "page.xsd"
    path.write_text(PAGE_SCHEMA, encoding="utf-8")
    return SchemaValidator(str(path))


class TestPageUpdater:
    """Test cases for PageUpdater class."""

    def test_submits_valid_page(self, validator):
        """A valid page is sent to the host as unformatted XML."""
        host = FakeHost()
        page = parse_xml(page_with_position("1.5"))

        assert PageUpdater(HostAPIWrapper(host), validator).update(page) is True

        (submitted,) = host.calls_to("update_page_content")
        assert parse_xml(submitted[0]).get("ID") == "pg-1"

    def test_submits_corrected_page(self, validator):
        """The corrected copy is what reaches the host."""
        host = FakeHost()
        page = parse_xml(page_with_position("12.345E+10"))

        assert PageUpdater(HostAPIWrapper(host), validator).update(page) is True

        (submitted,) = host.calls_to("update_page_content")
        position = parse_xml(submitted[0]).find(f"{{{NS}}}Position")
        assert position.get("x") == "12.3E+10"

    def test_withholds_invalid_page(self, validator):
        """An invalid page is never submitted."""
        host = FakeHost()
        page = parse_xml(page_with_position("200000000000"))

        assert PageUpdater(HostAPIWrapper(host), validator).update(page) is False
        assert host.calls_to("update_page_content") == []

    def test_non_page_element_is_not_validated(self):
        """Elements other than a page are submitted as they are."""
        host = FakeHost()
        validator = Mock()
        outline = parse_xml(f'<one:Outline xmlns:one="{NS}" objectID="obj-1"/>')

        assert PageUpdater(HostAPIWrapper(host), validator).update(outline) is True
        validator.validate.assert_not_called()

    def test_host_rejection(self, validator):
        """A host failure is reported as False."""
        host = FakeHost()
        host.fail("update_page_content", HostCallError(0x80042001, "invalid XML"))
        page = parse_xml(page_with_position("1.5"))

        assert PageUpdater(HostAPIWrapper(host), validator).update(page) is False
