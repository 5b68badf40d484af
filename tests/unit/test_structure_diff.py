"""Unit tests for hierarchy.structure_diff module."""

import logging

import pytest
from lxml import etree

from src.hierarchy.models import NodeKind
from src.hierarchy.snapshot import build_tree
from src.hierarchy.structure_diff import (
    StructureDiffDetector,
    child_id_set,
    child_ids,
    descendant_ids,
    find_new_id,
)
from src.host_client.api_wrapper import HostAPIWrapper, parse_xml
from tests.fixtures.hierarchy_fixtures import (
    NS,
    NOTEBOOK_NESTED,
    NOTEBOOK_WORK,
    SECTION_AFTER_IMPORT,
    SECTION_BEFORE_IMPORT,
    SECTIONS_AFTER,
    SECTIONS_BEFORE,
)
from tests.helpers.fake_host import FakeHost, HostCallError


PROJECTS_GROUP_AFTER = f"""
<one:SectionGroup xmlns:one="{NS}" name="Projects" ID="sg-projects">
  <one:Section name="Alpha" ID="sec-alpha" isCurrentlyViewed="true"/>
  <one:Section name="Gamma" ID="sec-gamma"/>
  <one:SectionGroup name="Archive" ID="sg-archive"/>
</one:SectionGroup>
"""


def section_names(xml):
    root = parse_xml(xml)
    return [s.get("name") for s in root.iter(f"{{{NS}}}Section")]


class TestFindNewId:
    """Test cases for find_new_id function."""

    def test_returns_added_id(self):
        """{A,B} before and {A,B,C} after yields C."""
        assert find_new_id({"A", "B"}, ["A", "B", "C"]) == "C"

    def test_no_change(self):
        """Equal sets yield no result."""
        assert find_new_id({"A", "B"}, ["B", "A"]) is None

    def test_removed_ids_are_ignored(self):
        """IDs that disappeared do not count as new."""
        assert find_new_id({"A", "B"}, ["A"]) is None

    def test_multiple_new_ids_returns_first(self, caplog):
        """More than one new ID returns the first and logs a warning."""
        with caplog.at_level(logging.WARNING, logger="src.hierarchy.structure_diff"):
            assert find_new_id({"A"}, ["A", "C", "D"]) == "C"
        assert "Found 2 new objects" in caplog.text

    def test_empty_before(self):
        """Everything is new when nothing existed before."""
        assert find_new_id(set(), ["A"]) == "A"


class TestIdSnapshots:
    """Test cases for child and descendant ID helpers."""

    def test_child_id_set_ignores_recycle_bin(self):
        """Recycle bin children are not part of the ID set."""
        root = build_tree(parse_xml(NOTEBOOK_WORK))
        assert child_id_set(root) == {"sec-ideas"}
        assert child_id_set(root, NodeKind.SECTION_GROUP) == set()

    def test_child_ids_in_document_order(self):
        """child_ids keeps document order."""
        root = build_tree(parse_xml(SECTIONS_AFTER))
        assert child_ids(root) == ["sec-ideas", "sec-plans", "sec-meetings"]

    def test_descendant_page_ids(self):
        """descendant_ids collects pages at any depth."""
        root = build_tree(parse_xml(NOTEBOOK_NESTED))
        assert descendant_ids(root) == ["pg-a", "pg-b", "pg-c", "pg-d", "pg-e"]

    def test_descendant_ids_skip_recycled_pages(self):
        """Pages in the recycle bin are excluded."""
        root = build_tree(parse_xml(NOTEBOOK_WORK))
        assert "pg-old" not in descendant_ids(root)


@pytest.fixture
def notebook_host():
    host = FakeHost(hierarchies={"nb-work": SECTIONS_BEFORE}, notebook_id="nb-work", section_id="sec-ideas")
    host.after_update_hierarchy = {"nb-work": SECTIONS_AFTER}
    return host


class TestCreateSection:
    """Test cases for StructureDiffDetector.create_section."""

    def test_returns_new_section(self, notebook_host):
        """The section the host created is identified by diffing."""
        section = StructureDiffDetector(HostAPIWrapper(notebook_host)).create_section("Plans")

        assert section.node_id == "sec-plans"
        assert section.name == "Plans"
        assert section.kind is NodeKind.SECTION

    def test_inserts_after_current_section(self, notebook_host):
        """The submitted notebook has the new section right after the current one."""
        StructureDiffDetector(HostAPIWrapper(notebook_host)).create_section("Plans")

        (submitted,) = notebook_host.calls_to("update_hierarchy")
        assert section_names(submitted[0]) == ["Ideas", "Plans", "Meetings"]

    def test_new_section_has_no_id(self, notebook_host):
        """The host assigns the ID; the request carries only the name."""
        StructureDiffDetector(HostAPIWrapper(notebook_host)).create_section("Plans")

        (submitted,) = notebook_host.calls_to("update_hierarchy")
        root = parse_xml(submitted[0])
        plans = root.find(f"{{{NS}}}Section[@name='Plans']")
        assert plans.get("ID") is None

    def test_appends_without_current_section(self):
        """Without a viewed section the new one is appended to the notebook."""
        before = SECTIONS_BEFORE.replace(' isCurrentlyViewed="true"', '')
        host = FakeHost(hierarchies={"nb-work": before}, notebook_id="nb-work")
        host.after_update_hierarchy = {"nb-work": SECTIONS_AFTER}

        StructureDiffDetector(HostAPIWrapper(host)).create_section("Plans")

        (submitted,) = host.calls_to("update_hierarchy")
        assert section_names(submitted[0]) == ["Ideas", "Meetings", "Plans"]

    def test_inside_section_group(self):
        """A current section in a group puts the new one in that group."""
        host = FakeHost(
            hierarchies={"nb-personal": NOTEBOOK_NESTED},
            notebook_id="nb-personal",
            section_id="sec-alpha",
        )
        host.after_update_hierarchy = {"sg-projects": PROJECTS_GROUP_AFTER}

        section = StructureDiffDetector(HostAPIWrapper(host)).create_section("Gamma")

        assert section.node_id == "sec-gamma"
        (submitted,) = host.calls_to("update_hierarchy")
        group = parse_xml(submitted[0])
        assert etree.QName(group).localname == "SectionGroup"
        assert group.get("ID") == "sg-projects"
        assert host.calls_to("get_hierarchy")[-1][0] == "sg-projects"

    def test_host_adds_nothing(self):
        """If the re-read shows no new section the result is None."""
        host = FakeHost(hierarchies={"nb-work": SECTIONS_BEFORE}, notebook_id="nb-work")
        assert StructureDiffDetector(HostAPIWrapper(host)).create_section("Plans") is None

    def test_rejected_update(self, notebook_host):
        """A rejected hierarchy update yields None without a re-read."""
        notebook_host.fail("update_hierarchy", HostCallError(0x80042001, "invalid XML"))

        assert StructureDiffDetector(HostAPIWrapper(notebook_host)).create_section("Plans") is None
        assert len(notebook_host.calls_to("get_hierarchy")) == 1

    def test_no_current_notebook(self):
        """Without a notebook nothing is submitted."""
        host = FakeHost()
        assert StructureDiffDetector(HostAPIWrapper(host)).create_section("Plans") is None
        assert host.calls_to("update_hierarchy") == []


@pytest.fixture
def section_host():
    host = FakeHost(hierarchies={"sec-ideas": SECTION_BEFORE_IMPORT}, section_id="sec-ideas")
    host.open_results["C:/exports/Imported.one"] = "sec-open"
    host.after_merge = {"sec-ideas": SECTION_AFTER_IMPORT}
    return host


class TestImportSection:
    """Test cases for StructureDiffDetector.import_section."""

    def test_returns_imported_page(self, section_host):
        """The merged page is identified by diffing the section."""
        page_id = StructureDiffDetector(HostAPIWrapper(section_host)).import_section("C:/exports/Imported.one")

        assert page_id == "pg-imported"
        assert section_host.calls_to("merge_sections") == [("sec-open", "sec-ideas")]

    def test_open_failure(self, section_host):
        """If the host does not open the file nothing is merged."""
        page_id = StructureDiffDetector(HostAPIWrapper(section_host)).import_section("C:/missing.one")

        assert page_id is None
        assert section_host.calls_to("merge_sections") == []

    def test_merge_failure(self, section_host):
        """A failed merge yields None."""
        section_host.fail("merge_sections", HostCallError(0x80042014, "object does not exist"))

        page_id = StructureDiffDetector(HostAPIWrapper(section_host)).import_section("C:/exports/Imported.one")

        assert page_id is None

    def test_no_current_section(self):
        """Without a current section nothing is opened."""
        host = FakeHost()
        assert StructureDiffDetector(HostAPIWrapper(host)).import_section("C:/x.one") is None
        assert host.calls_to("open_hierarchy") == []
