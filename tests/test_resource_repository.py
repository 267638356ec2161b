"""Tests for the ResourceRepository class."""
import datetime

import pytest

from brain_mcp.exceptions import ResourceNotFoundError, StorageError
from brain_mcp.models.schema import Link, Resource, ResourceType


def _at(minute):
    return datetime.datetime(2024, 1, 1, 12, minute, tzinfo=datetime.timezone.utc)


def _file(resource_id, path, content="", minute=0, resource_type=ResourceType.NOTE):
    return Resource(
        id=resource_id,
        type=resource_type,
        path=path,
        title=path.rsplit("/", 1)[-1],
        content=content,
        created_at=_at(minute),
        updated_at=_at(minute),
    )


class TestUpsert:
    def test_insert_then_get(self, resource_repository):
        resource_repository.upsert(_file("n1", "/v/a.md", "x"))
        stored = resource_repository.get("n1")
        assert stored.type is ResourceType.NOTE
        assert stored.path == "/v/a.md"
        assert stored.title == "a.md"
        assert stored.content == "x"

    def test_conflict_refreshes_only_content(self, resource_repository):
        resource_repository.upsert(_file("n1", "/v/a.md", "old", minute=0))
        changed = Resource(
            id="n1",
            type=ResourceType.FILE,
            path="/elsewhere/b.txt",
            title="renamed",
            content="new",
            created_at=_at(30),
            updated_at=_at(30),
            extra_metadata={"k": "v"},
        )
        resource_repository.upsert(changed)

        stored = resource_repository.get("n1")
        assert stored.content == "new"
        assert stored.updated_at == _at(30)
        assert stored.type is ResourceType.NOTE
        assert stored.path == "/v/a.md"
        assert stored.title == "a.md"
        assert stored.created_at == _at(0)
        assert stored.extra_metadata is None
        assert resource_repository.count() == 1


class TestCreate:
    def test_duplicate_id_fails(self, resource_repository):
        resource_repository.create(Resource(id="t1", type=ResourceType.TASK, title="a"))
        with pytest.raises(StorageError):
            resource_repository.create(Resource(id="t1", type=ResourceType.TASK, title="b"))

    def test_metadata_round_trip(self, resource_repository):
        resource_repository.create(
            Resource(id="l1", type=ResourceType.LINK, title="Docs",
                     extra_metadata={"url": "https://example.com"})
        )
        assert resource_repository.get("l1").extra_metadata == {"url": "https://example.com"}

    def test_get_missing(self, resource_repository):
        assert resource_repository.get("missing") is None


class TestLookups:
    def test_find_id_by_path(self, resource_repository):
        resource_repository.upsert(_file("n1", "/v/a.md"))
        assert resource_repository.find_id_by_path("/v/a.md") == "n1"
        assert resource_repository.find_id_by_path("/v/A.md") is None

    def test_get_content(self, resource_repository):
        resource_repository.upsert(_file("n1", "/v/a.md", "body"))
        note = resource_repository.get_content("n1")
        assert (note.id, note.title, note.content) == ("n1", "a.md", "body")

    def test_get_content_null_content(self, resource_repository):
        resource_repository.create(Resource(id="t1", type=ResourceType.TASK, title="Do it"))
        assert resource_repository.get_content("t1").content == ""

    def test_get_content_missing(self, resource_repository):
        with pytest.raises(ResourceNotFoundError):
            resource_repository.get_content("missing")

    def test_get_path(self, resource_repository):
        resource_repository.upsert(_file("n1", "/v/a.md"))
        resource_repository.create(Resource(id="t1", type=ResourceType.TASK, title="x"))
        assert resource_repository.get_path("n1") == "/v/a.md"
        assert resource_repository.get_path("t1") is None
        with pytest.raises(ResourceNotFoundError):
            resource_repository.get_path("missing")


class TestListSummaries:
    def test_ordered_by_updated_desc(self, resource_repository):
        resource_repository.upsert(_file("old", "/v/old.md", minute=1))
        resource_repository.upsert(_file("new", "/v/new.md", minute=5))
        resource_repository.upsert(_file("mid", "/v/mid.md", minute=3))
        ids = [r.id for r in resource_repository.list_summaries()]
        assert ids == ["new", "mid", "old"]

    def test_ties_broken_by_id(self, resource_repository):
        resource_repository.upsert(_file("b", "/v/b.md", minute=1))
        resource_repository.upsert(_file("a", "/v/a.md", minute=1))
        ids = [r.id for r in resource_repository.list_summaries()]
        assert ids == ["a", "b"]

    def test_summary_fields(self, resource_repository):
        resource_repository.create(
            Resource(id="l1", type=ResourceType.LINK, title="Docs",
                     extra_metadata={"url": "https://example.com"})
        )
        (summary,) = resource_repository.list_summaries()
        assert summary.type is ResourceType.LINK
        assert summary.path is None
        assert summary.extra_metadata == {"url": "https://example.com"}
        assert not hasattr(summary, "content")

    def test_empty(self, resource_repository):
        assert resource_repository.list_summaries() == []


class TestUpdateAndDelete:
    def test_update_note(self, resource_repository):
        resource_repository.upsert(_file("n1", "/v/a.md", "old", minute=0))
        resource_repository.update_note("n1", "New title", "new")
        stored = resource_repository.get("n1")
        assert stored.title == "New title"
        assert stored.content == "new"
        assert stored.updated_at > _at(0)
        assert stored.path == "/v/a.md"

    def test_update_missing(self, resource_repository):
        with pytest.raises(ResourceNotFoundError):
            resource_repository.update_note("missing", "t", "c")

    def test_delete(self, resource_repository):
        resource_repository.upsert(_file("n1", "/v/a.md"))
        assert resource_repository.delete("n1") is True
        assert resource_repository.get("n1") is None
        assert resource_repository.delete("n1") is False

    def test_delete_cascades_links(self, resource_repository, link_repository):
        for rid in ("a", "b", "c"):
            resource_repository.create(Resource(id=rid, type=ResourceType.TASK, title=rid))
        link_repository.create(Link(source_id="a", target_id="b"))
        link_repository.create(Link(source_id="c", target_id="a"))
        link_repository.create(Link(source_id="b", target_id="c"))

        resource_repository.delete("a")

        remaining = link_repository.get_all()
        assert [(l.source_id, l.target_id) for l in remaining] == [("b", "c")]

    def test_delete_cascades_tags(self, resource_repository, tag_repository):
        resource_repository.create(Resource(id="a", type=ResourceType.TASK, title="a"))
        tag_repository.add_to_resource("a", "urgent")
        resource_repository.delete("a")
        assert tag_repository.find_resource_ids_by_tag("urgent") == []


class TestCounts:
    def test_count_by_type(self, resource_repository):
        resource_repository.upsert(_file("n1", "/v/a.md"))
        resource_repository.upsert(_file("f1", "/v/b.txt", resource_type=ResourceType.FILE))
        resource_repository.create(Resource(id="t1", type=ResourceType.TASK, title="x"))
        resource_repository.create(Resource(id="t2", type=ResourceType.TASK, title="y"))
        assert resource_repository.count() == 4
        assert resource_repository.count_by_type() == {"note": 1, "file": 1, "task": 2}

    def test_list_all_resources_and_links(self, resource_repository, link_repository):
        resource_repository.create(Resource(id="a", type=ResourceType.TASK, title="A"))
        resource_repository.create(Resource(id="b", type=ResourceType.TASK, title="B"))
        link_repository.create(Link(source_id="a", target_id="b", type="parent"))
        resources, links = resource_repository.list_all_resources_and_links()
        assert {r.id for r in resources} == {"a", "b"}
        assert links == [Link(source_id="a", target_id="b", type="parent")]
