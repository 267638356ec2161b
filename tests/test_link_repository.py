"""Tests for the LinkRepository and TagRepository classes."""
import pytest

from brain_mcp.exceptions import ErrorCode, LinkError, ResourceNotFoundError, TagError
from brain_mcp.models.schema import Link, Resource, ResourceType, Tag


@pytest.fixture
def three_resources(resource_repository):
    for rid in ("a", "b", "c"):
        resource_repository.create(Resource(id=rid, type=ResourceType.TASK, title=rid.upper()))
    return ["a", "b", "c"]


class TestLinkRepository:
    """Tests for directed links."""

    def test_create_and_get(self, link_repository, three_resources):
        link_repository.create(Link(source_id="a", target_id="b", type="wikilink"))
        link = link_repository.get("a", "b")
        assert link == Link(source_id="a", target_id="b", type="wikilink")
        assert link_repository.get("b", "a") is None

    def test_type_case_survives_storage(self, link_repository, three_resources):
        link_repository.create(Link(source_id="a", target_id="b", type=" DependsOn "))
        link_repository.create(Link(source_id="a", target_id="c", type="dependson"))
        assert link_repository.get("a", "b").type == "DependsOn"
        assert link_repository.get("a", "c").type == "dependson"

    def test_missing_endpoint(self, link_repository, three_resources):
        with pytest.raises(ResourceNotFoundError) as exc_info:
            link_repository.create(Link(source_id="a", target_id="ghost"))
        assert exc_info.value.resource_id == "ghost"
        assert link_repository.count() == 0

    def test_duplicate_pair_rejected(self, link_repository, three_resources):
        link_repository.create(Link(source_id="a", target_id="b"))
        with pytest.raises(LinkError) as exc_info:
            link_repository.create(Link(source_id="a", target_id="b", type="parent"))
        assert exc_info.value.code == ErrorCode.LINK_ALREADY_EXISTS
        assert link_repository.get("a", "b").type == "reference"

    def test_reverse_direction_allowed(self, link_repository, three_resources):
        link_repository.create(Link(source_id="a", target_id="b"))
        link_repository.create(Link(source_id="b", target_id="a"))
        assert link_repository.count() == 2

    def test_outgoing_incoming(self, link_repository, three_resources):
        link_repository.create(Link(source_id="a", target_id="b"))
        link_repository.create(Link(source_id="a", target_id="c"))
        link_repository.create(Link(source_id="c", target_id="a"))
        assert {l.target_id for l in link_repository.get_outgoing("a")} == {"b", "c"}
        assert [l.source_id for l in link_repository.get_incoming("a")] == ["c"]

    def test_all_for_resource_self_link_once(self, link_repository, three_resources):
        link_repository.create(Link(source_id="a", target_id="a"))
        link_repository.create(Link(source_id="b", target_id="a"))
        links = link_repository.get_all_for_resource("a")
        assert [(l.source_id, l.target_id) for l in links] == [("a", "a"), ("b", "a")]

    def test_delete(self, link_repository, three_resources):
        link_repository.create(Link(source_id="a", target_id="b"))
        assert link_repository.delete("a", "b") is True
        assert link_repository.delete("a", "b") is False
        assert link_repository.get_all() == []


class TestTagRepository:
    """Tests for tags and resource tagging."""

    def test_names_stripped_and_shared(self, tag_repository, three_resources):
        tag_repository.add_to_resource("a", "python")
        tag_repository.add_to_resource("b", " python ")
        assert tag_repository.get_all() == [Tag(name="python")]

    def test_empty_tag_rejected(self, tag_repository):
        with pytest.raises(TagError):
            tag_repository.add_to_resource("a", "   ")

    def test_add_and_list(self, tag_repository, three_resources):
        tag_repository.add_to_resource("a", "work")
        tag_repository.add_to_resource("a", "urgent")
        tag_repository.add_to_resource("a", "work")
        tag_repository.add_to_resource("b", "work")
        assert [t.name for t in tag_repository.get_for_resource("a")] == ["urgent", "work"]
        assert sorted(tag_repository.find_resource_ids_by_tag("work")) == ["a", "b"]

    def test_add_to_missing_resource(self, tag_repository):
        with pytest.raises(ResourceNotFoundError):
            tag_repository.add_to_resource("ghost", "work")

    def test_remove(self, tag_repository, three_resources):
        tag_repository.add_to_resource("a", "work")
        assert tag_repository.remove_from_resource("a", "work") is True
        assert tag_repository.remove_from_resource("a", "work") is False
        assert tag_repository.remove_from_resource("a", "never") is False
        assert tag_repository.get_for_resource("a") == []

    def test_delete_unused(self, tag_repository, three_resources):
        tag_repository.add_to_resource("a", "kept")
        tag_repository.add_to_resource("b", "orphan")
        tag_repository.remove_from_resource("b", "orphan")
        assert tag_repository.delete_unused() == 1
        assert tag_repository.get_all() == [Tag(name="kept")]
