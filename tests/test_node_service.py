"""Unit tests for NodeService: the tree engine's client operations.

Tests the service layer directly against the in-memory database, bypassing
the HTTP stack. Covers creation and ordering, scopes, moves and reorders,
cascading soft-delete, content versioning, tags, folder walks and search.
"""

import pytest

from doctree.database import SessionLocal
from doctree.exceptions import (
    AuthenticationError,
    ConflictError,
    ForbiddenError,
    InvalidStateError,
    NodeNotFoundError,
    TagNotFoundError,
    ValidationError,
)
from doctree.models import Activity, DocumentVersion, Node, Tag
from doctree.services.node_service import NodeService


def _words(n: int) -> dict:
    return {"type": "doc", "content": [{"type": "paragraph", "content": [{"type": "text", "text": " ".join(["w"] * n)}]}]}


@pytest.fixture()
def svc(db, clock):
    return NodeService(db, clock=clock)


def _orders(db, parent_id=None):
    rows = db.query(Node).filter(Node.parent_id.is_(None) if parent_id is None else Node.parent_id == parent_id,
                                 Node.is_deleted.is_(False)).all()
    return {n.title: n.order for n in rows}


class TestCreate:

    def test_next_order_zero_then_one(self, svc, alice):
        folder = svc.create(alice, "folder", None, "Projects")
        first = svc.create(alice, "doc", folder, "First")
        second = svc.create(alice, "doc", folder, "Second")
        assert svc.get(alice, first).order == 0
        assert svc.get(alice, second).order == 1

    def test_new_node_ranks_after_siblings_with_gaps(self, svc, db, alice):
        a = svc.create(alice, "doc", None, "A")
        db.query(Node).filter(Node.id == a).update({"order": 7})
        db.commit()
        b = svc.create(alice, "doc", None, "B")
        assert svc.get(alice, b).order == 8

    def test_doc_defaults(self, svc, alice, clock):
        doc = svc.get(alice, svc.create(alice, "doc", None, "Draft"))
        assert doc.status == "draft"
        assert doc.content is None
        assert doc.current_version_string is None
        assert doc.owner_id == alice.subject
        assert doc.org_id is None
        assert doc.created_at == clock.now
        assert doc.updated_by_name == "Alice"

    def test_folder_has_no_status(self, svc, alice):
        folder = svc.get(alice, svc.create(alice, "folder", None, "F"))
        assert folder.status is None

    def test_org_scope(self, svc, alice):
        node = svc.get(alice, svc.create(alice, "doc", None, "Shared", org_id="org-1"))
        assert node.org_id == "org-1"
        assert node.owner_id is None

    def test_unknown_type(self, svc, alice):
        with pytest.raises(ValidationError):
            svc.create(alice, "spreadsheet", None, "x")

    def test_unauthenticated(self, svc):
        with pytest.raises(AuthenticationError):
            svc.create(None, "doc", None, "x")

    def test_records_activity(self, svc, db, alice):
        node_id = svc.create(alice, "folder", None, "Logged")
        entry = db.query(Activity).filter(Activity.node_id == node_id).one()
        assert entry.type == "folder_created"
        assert entry.user_name == "Alice"

    def test_create_with_content(self, svc, db, alice, clock):
        node_id = svc.create_with_content(alice, None, "Upload", _words(3), source_file="notes.md")
        doc = svc.get(alice, node_id)
        assert doc.type == "doc"
        assert doc.current_version_string == "v1.0"
        assert doc.last_version_snapshot_at == clock.now
        assert db.query(DocumentVersion).count() == 0
        entry = db.query(Activity).filter(Activity.node_id == node_id).one()
        assert entry.details == "Uploaded from notes.md"


class TestParentValidation:

    def test_missing_parent(self, svc, alice):
        with pytest.raises(NodeNotFoundError):
            svc.create(alice, "doc", "node-missing", "x")

    def test_deleted_parent(self, svc, alice):
        folder = svc.create(alice, "folder", None, "F")
        svc.remove(alice, folder)
        with pytest.raises(NodeNotFoundError):
            svc.create(alice, "doc", folder, "x")

    def test_doc_parent_rejected(self, svc, alice):
        doc = svc.create(alice, "doc", None, "D")
        with pytest.raises(InvalidStateError):
            svc.create(alice, "doc", doc, "x")

    def test_cross_scope_parent_rejected(self, svc, alice):
        org_folder = svc.create(alice, "folder", None, "Org", org_id="org-1")
        with pytest.raises(InvalidStateError):
            svc.create(alice, "doc", org_folder, "personal child")

    def test_other_users_folder_rejected(self, svc, alice, bob):
        folder = svc.create(alice, "folder", None, "Alice only")
        with pytest.raises(InvalidStateError):
            svc.create(bob, "doc", folder, "intruder")


class TestQueries:

    def test_unauthenticated_queries_are_empty(self, svc, alice):
        node_id = svc.create(alice, "doc", None, "D", org_id="org-1")
        assert svc.list(None, "org-1") == []
        assert svc.get(None, node_id) is None
        assert svc.get_children(None, None, "org-1") == []
        assert svc.search(None, "d") == []

    def test_personal_nodes_hidden_from_others(self, svc, alice, bob):
        node_id = svc.create(alice, "doc", None, "Private")
        assert svc.get(bob, node_id) is None
        assert svc.list(bob) == []
        assert [n.id for n in svc.list(alice)] == [node_id]

    def test_org_nodes_visible_to_members(self, svc, alice, bob):
        node_id = svc.create(alice, "doc", None, "Team", org_id="org-1")
        assert svc.get(bob, node_id).id == node_id
        assert [n.id for n in svc.list_organization(bob, "org-1")] == [node_id]
        assert svc.list_personal(bob) == []

    def test_get_children_sorted_and_live(self, svc, alice):
        folder = svc.create(alice, "folder", None, "F")
        a = svc.create(alice, "doc", folder, "A")
        b = svc.create(alice, "doc", folder, "B")
        c = svc.create(alice, "doc", folder, "C")
        svc.remove(alice, b)
        svc.reorder(alice, c, folder, 0)
        assert [n.id for n in svc.get_children(alice, folder)] == [c, a]

    def test_get_children_of_invisible_parent(self, svc, alice, bob):
        folder = svc.create(alice, "folder", None, "F")
        svc.create(alice, "doc", folder, "A")
        assert svc.get_children(bob, folder) == []

    def test_deleted_node_is_none(self, svc, alice):
        node_id = svc.create(alice, "doc", None, "D")
        svc.remove(alice, node_id)
        assert svc.get(alice, node_id) is None


class TestMutationAccess:

    def test_forbidden_for_other_owner(self, svc, alice, bob):
        node_id = svc.create(alice, "doc", None, "Mine")
        with pytest.raises(ForbiddenError):
            svc.update_title(bob, node_id, "Theirs")

    def test_not_found(self, svc, alice):
        with pytest.raises(NodeNotFoundError):
            svc.update_title(alice, "node-nope", "x")

    def test_unauthenticated(self, svc, alice):
        node_id = svc.create(alice, "doc", None, "Mine")
        with pytest.raises(AuthenticationError):
            svc.remove(None, node_id)

    def test_org_member_may_edit(self, svc, alice, bob):
        node_id = svc.create(alice, "doc", None, "Team", org_id="org-1")
        svc.update_title(bob, node_id, "Renamed by Bob")
        node = svc.get(alice, node_id)
        assert node.title == "Renamed by Bob"
        assert node.updated_by == bob.subject


class TestFieldUpdates:

    def test_title_touches_audit_fields(self, svc, alice, bob, clock):
        node_id = svc.create(alice, "doc", None, "Old", org_id="org-1")
        later = clock.advance(60)
        svc.update_title(bob, node_id, "New")
        node = svc.get(alice, node_id)
        assert node.title == "New"
        assert node.updated_at == later
        assert node.updated_by_name == "Bob"

    def test_icon(self, svc, alice):
        node_id = svc.create(alice, "folder", None, "F")
        svc.update_icon(alice, node_id, "📁")
        assert svc.get(alice, node_id).icon == "📁"

    def test_status_docs_only(self, svc, alice):
        doc = svc.create(alice, "doc", None, "D")
        folder = svc.create(alice, "folder", None, "F")
        svc.update_status(alice, doc, "in_review")
        assert svc.get(alice, doc).status == "in_review"
        with pytest.raises(InvalidStateError):
            svc.update_status(alice, folder, "final")
        with pytest.raises(ValidationError):
            svc.update_status(alice, doc, "archived")

    def test_description_folders_only(self, svc, alice):
        doc = svc.create(alice, "doc", None, "D")
        folder = svc.create(alice, "folder", None, "F")
        svc.update_description(alice, folder, {"text": "About"})
        assert svc.get(alice, folder).description == {"text": "About"}
        with pytest.raises(InvalidStateError):
            svc.update_description(alice, doc, {"text": "x"})


class TestTags:

    def test_usage_counts_follow_changes(self, svc, db, alice, make_tag):
        plan, ops = make_tag("planning"), make_tag("ops", usage_count=2)
        node_id = svc.create(alice, "doc", None, "D")

        svc.update_tags(alice, node_id, [plan, ops])
        assert svc.get(alice, node_id).tag_ids == [plan, ops]
        assert db.get(Tag, plan).usage_count == 1
        assert db.get(Tag, ops).usage_count == 3

        svc.update_tags(alice, node_id, [plan])
        db.expire_all()
        assert db.get(Tag, plan).usage_count == 1
        assert db.get(Tag, ops).usage_count == 2

    def test_usage_count_floored_at_zero(self, svc, db, alice, make_tag):
        tag = make_tag("stale")
        node_id = svc.create(alice, "doc", None, "D")
        db.query(Node).filter(Node.id == node_id).update({"tag_ids": [tag]})
        db.commit()
        svc.update_tags(alice, node_id, [])
        assert db.get(Tag, tag).usage_count == 0

    def test_unknown_tag_rejected_before_write(self, svc, alice, make_tag):
        tag = make_tag("known")
        node_id = svc.create(alice, "doc", None, "D")
        with pytest.raises(TagNotFoundError):
            svc.update_tags(alice, node_id, [tag, "tag-unknown"])
        assert svc.get(alice, node_id).tag_ids == []


class TestMove:

    def test_appends_after_new_siblings(self, svc, alice):
        src = svc.create(alice, "folder", None, "Src")
        dst = svc.create(alice, "folder", None, "Dst")
        for title in ("a", "b"):
            svc.create(alice, "doc", dst, title)
        moving = svc.create(alice, "doc", src, "m")
        svc.move(alice, moving, dst)
        node = svc.get(alice, moving)
        assert node.parent_id == dst
        assert node.order == 2

    def test_move_to_root(self, svc, alice):
        folder = svc.create(alice, "folder", None, "F")
        doc = svc.create(alice, "doc", folder, "D")
        svc.move(alice, doc, None)
        node = svc.get(alice, doc)
        assert node.parent_id is None
        assert node.order == 1

    def test_cannot_move_into_itself(self, svc, alice):
        folder = svc.create(alice, "folder", None, "F")
        with pytest.raises(InvalidStateError):
            svc.move(alice, folder, folder)

    def test_cannot_move_into_descendant(self, svc, alice):
        top = svc.create(alice, "folder", None, "Top")
        mid = svc.create(alice, "folder", top, "Mid")
        low = svc.create(alice, "folder", mid, "Low")
        with pytest.raises(InvalidStateError):
            svc.move(alice, top, low)
        assert svc.get(alice, top).parent_id is None


class TestReorder:

    def _bucket(self, svc, alice, n=4):
        folder = svc.create(alice, "folder", None, "F")
        ids = [svc.create(alice, "doc", folder, f"d{i}") for i in range(n)]
        return folder, ids

    def test_contiguous_after_reorder(self, svc, db, alice):
        folder, ids = self._bucket(svc, alice)
        svc.reorder(alice, ids[3], folder, 1)
        assert _orders(db, folder) == {"d0": 0, "d3": 1, "d1": 2, "d2": 3}

    def test_index_past_end_lands_last(self, svc, db, alice):
        folder, ids = self._bucket(svc, alice)
        svc.reorder(alice, ids[0], folder, 50)
        orders = _orders(db, folder)
        assert sorted(orders.values()) == [0, 1, 2, 3]
        assert orders["d0"] == 3

    def test_reorder_into_other_bucket(self, svc, db, alice):
        folder, ids = self._bucket(svc, alice, n=3)
        other = svc.create(alice, "folder", None, "Other")
        loose = svc.create(alice, "doc", other, "loose")
        svc.reorder(alice, loose, folder, 0)
        assert _orders(db, folder) == {"loose": 0, "d0": 1, "d1": 2, "d2": 3}
        assert _orders(db, other) == {}

    def test_normalizes_sparse_orders(self, svc, db, alice):
        folder, ids = self._bucket(svc, alice, n=3)
        db.query(Node).filter(Node.id == ids[0]).update({"order": 10})
        db.query(Node).filter(Node.id == ids[1]).update({"order": 20})
        db.query(Node).filter(Node.id == ids[2]).update({"order": 30})
        db.commit()
        svc.reorder(alice, ids[2], folder, 0)
        assert _orders(db, folder) == {"d2": 0, "d0": 1, "d1": 2}

    def test_deleted_siblings_are_skipped(self, svc, db, alice):
        folder, ids = self._bucket(svc, alice)
        svc.remove(alice, ids[1])
        svc.reorder(alice, ids[0], folder, 2)
        assert _orders(db, folder) == {"d2": 0, "d3": 1, "d0": 2}

    def test_interleaved_reorders_are_last_writer_wins_per_row(self, svc, db, alice, clock, monkeypatch):
        folder, ids = self._bucket(svc, alice)
        first, second = SessionLocal(), SessionLocal()
        try:
            writer = NodeService(first, clock=clock)
            other = NodeService(second, clock=clock)
            real_get_children = writer.repo.get_children

            def _read_then_other_reorders(scope, parent_id):
                siblings = real_get_children(scope, parent_id)
                other.reorder(alice, ids[0], folder, 3)
                return siblings

            monkeypatch.setattr(writer.repo, "get_children", _read_then_other_reorders)
            # planned on d0..d3 = 0..3 while the other session moved d0 last
            writer.reorder(alice, ids[1], folder, 0)
        finally:
            first.close()
            second.close()

        db.expire_all()
        assert _orders(db, folder) == {"d1": 0, "d0": 1, "d2": 1, "d3": 2}

        svc.reorder(alice, ids[3], folder, 3)
        db.expire_all()
        orders = _orders(db, folder)
        assert sorted(orders.values()) == [0, 1, 2, 3]
        assert orders["d1"] == 0
        assert orders["d3"] == 3


class TestRemove:

    def test_cascades_one_level(self, svc, db, alice):
        root = svc.create(alice, "folder", None, "Root")
        child_doc = svc.create(alice, "doc", root, "child doc")
        child_folder = svc.create(alice, "folder", root, "child folder")
        grandchild = svc.create(alice, "doc", child_folder, "grandchild")
        bystander = svc.create(alice, "doc", None, "bystander")

        svc.remove(alice, root)

        deleted = {n.id for n in db.query(Node).filter(Node.is_deleted.is_(True))}
        assert deleted == {root, child_doc, child_folder}
        assert db.get(Node, grandchild).is_deleted is False
        assert svc.get(alice, bystander) is not None

    def test_sets_deleted_at_and_activity(self, svc, db, alice, clock):
        doc = svc.create(alice, "doc", None, "D")
        when = clock.advance(5)
        svc.remove(alice, doc)
        assert db.get(Node, doc).deleted_at == when
        types = [a.type for a in db.query(Activity).order_by(Activity.id)]
        assert types == ["doc_created", "doc_deleted"]

    def test_already_deleted(self, svc, alice):
        doc = svc.create(alice, "doc", None, "D")
        svc.remove(alice, doc)
        with pytest.raises(NodeNotFoundError):
            svc.remove(alice, doc)

    def test_activity_failure_does_not_undo_delete(self, svc, db, alice, monkeypatch):
        from doctree.services import activity_service
        import sqlalchemy.exc

        doc = svc.create(alice, "doc", None, "D")

        def _broken_add(entry):
            raise sqlalchemy.exc.OperationalError("INSERT", {}, Exception("disk full"))

        monkeypatch.setattr(db, "add", _broken_add)
        svc.remove(alice, doc)
        monkeypatch.undo()
        assert db.get(Node, doc).is_deleted is True
        assert activity_service.get_by_node(db, doc)[0].type == "doc_created"


class TestToggleSharing:

    def test_personal_to_org_and_back(self, svc, alice, bob):
        doc = svc.create(alice, "doc", None, "D")
        svc.toggle_sharing(alice, doc, "org-1")
        node = svc.get(alice, doc)
        assert (node.owner_id, node.org_id) == (None, "org-1")

        svc.toggle_sharing(bob, doc)
        node = svc.get(bob, doc)
        assert (node.owner_id, node.org_id) == (bob.subject, None)
        assert svc.get(alice, doc) is None

    def test_share_requires_org(self, svc, alice):
        doc = svc.create(alice, "doc", None, "D")
        with pytest.raises(InvalidStateError):
            svc.toggle_sharing(alice, doc)
        node = svc.get(alice, doc)
        assert node.owner_id == alice.subject and node.org_id is None

    def test_subtree_follows_and_node_detaches(self, svc, alice):
        outer = svc.create(alice, "folder", None, "Outer")
        folder = svc.create(alice, "folder", outer, "F")
        child = svc.create(alice, "doc", folder, "C")
        svc.create(alice, "doc", None, "Org root doc", org_id="org-1")

        svc.toggle_sharing(alice, folder, "org-1")

        moved = svc.get(alice, folder)
        assert moved.parent_id is None
        assert moved.order == 1
        assert svc.get(alice, child).org_id == "org-1"
        assert svc.get(alice, child).parent_id == folder
        assert svc.get(alice, outer).org_id is None


class TestUpdateContent:

    def test_first_save_initialises_v1(self, svc, db, alice):
        doc = svc.create(alice, "doc", None, "D")
        svc.update_content(alice, doc, _words(2))
        node = svc.get(alice, doc)
        assert node.current_version_string == "v1.0"
        assert node.content == _words(2)
        assert db.query(DocumentVersion).count() == 0

    def test_burst_produces_one_snapshot_of_pre_burst_content(self, svc, db, alice, clock):
        doc = svc.create(alice, "doc", None, "D")
        svc.update_content(alice, doc, "original")

        clock.advance(31)
        for i in range(5):
            svc.update_content(alice, doc, f"edit {i}")
            clock.advance(5)

        versions = db.query(DocumentVersion).filter(DocumentVersion.doc_id == doc).all()
        assert len(versions) == 1
        assert versions[0].content == "original"
        assert versions[0].version_string == "v1.1"
        assert versions[0].is_major_version is False
        node = svc.get(alice, doc)
        assert node.content == "edit 4"
        assert node.current_version_string == "v1.1"

    def test_next_window_snapshots_again(self, svc, db, alice, clock):
        doc = svc.create(alice, "doc", None, "D")
        svc.update_content(alice, doc, "one")
        clock.advance(31)
        svc.update_content(alice, doc, "two")
        clock.advance(31)
        svc.update_content(alice, doc, "three")
        versions = db.query(DocumentVersion).order_by(DocumentVersion.minor_version).all()
        assert [(v.version_string, v.content) for v in versions] == [("v1.1", "one"), ("v1.2", "two")]

    def test_snapshot_freezes_previous_title(self, svc, db, alice, clock):
        doc = svc.create(alice, "doc", None, "Before")
        svc.update_content(alice, doc, "one")
        clock.advance(40)
        svc.update_content(alice, doc, "two")
        assert db.query(DocumentVersion).one().title == "Before"

    def test_folders_have_no_content(self, svc, alice):
        folder = svc.create(alice, "folder", None, "F")
        with pytest.raises(InvalidStateError):
            svc.update_content(alice, folder, "x")

    def test_lost_race_raises_conflict_and_writes_nothing(self, svc, db, alice, clock, monkeypatch):
        doc = svc.create(alice, "doc", None, "D")
        svc.update_content(alice, doc, "kept")
        versions_before = db.query(DocumentVersion).count()
        clock.advance(60)
        real_compare_and_patch = svc.repo.compare_and_patch

        def _concurrent_write_first(node_id, expected_revision, fields):
            db.query(Node).filter(Node.id == node_id).update(
                {"content": "theirs", "content_revision": Node.content_revision + 1},
                synchronize_session="fetch",
            )
            db.commit()
            return real_compare_and_patch(node_id, expected_revision, fields)

        monkeypatch.setattr(svc.repo, "compare_and_patch", _concurrent_write_first)
        with pytest.raises(ConflictError):
            svc.update_content(alice, doc, "lost")
        monkeypatch.undo()

        db.expire_all()
        node = svc.get(alice, doc)
        assert node.content == "theirs"
        assert node.content_revision == 2
        assert db.query(DocumentVersion).count() == versions_before

    def test_stale_revision_matches_no_row(self, svc, db, alice):
        doc = svc.create(alice, "doc", None, "D")
        svc.update_content(alice, doc, "v1")
        assert svc.repo.compare_and_patch(doc, 0, {"content": "stale"}) is False
        assert svc.repo.compare_and_patch(doc, 1, {"content": "fresh"}) is True
        db.commit()
        db.expire_all()
        node = db.get(Node, doc)
        assert (node.content, node.content_revision) == ("fresh", 2)

    def test_revision_advances_on_every_save(self, svc, alice):
        doc = svc.create(alice, "doc", None, "D")
        svc.update_content(alice, doc, "a")
        svc.update_content(alice, doc, "b")
        assert svc.get(alice, doc).content_revision == 2

    def test_zero_window_snapshots_every_save(self, db, alice, clock):
        svc = NodeService(db, clock=clock, batch_window=0)
        doc = svc.create(alice, "doc", None, "D")
        svc.update_content(alice, doc, "a")
        clock.advance(1)
        svc.update_content(alice, doc, "b")
        clock.advance(1)
        svc.update_content(alice, doc, "c")
        assert db.query(DocumentVersion).count() == 2


class TestFolderWalks:

    def _tree(self, svc, alice, bob, clock):
        root = svc.create(alice, "folder", None, "Root", org_id="org-1")
        a = svc.create(alice, "doc", root, "A", org_id="org-1")
        b = svc.create(alice, "doc", root, "B", org_id="org-1")
        sub = svc.create(alice, "folder", root, "Sub", org_id="org-1")
        c = svc.create(alice, "doc", sub, "C", org_id="org-1")
        clock.advance(1)
        svc.update_content(alice, a, _words(80))
        clock.advance(1)
        svc.update_content(alice, b, _words(40))
        clock.advance(1)
        svc.update_content(bob, c, _words(30))
        return root, sub

    def test_folder_stats(self, svc, alice, bob, clock):
        root, _ = self._tree(svc, alice, bob, clock)
        stats = svc.get_folder_stats(alice, root)
        assert stats.total_docs == 3
        assert stats.total_folders == 1
        assert stats.estimated_words == 150

    def test_stats_skip_deleted_subtree(self, svc, alice, bob, clock):
        root, sub = self._tree(svc, alice, bob, clock)
        svc.remove(alice, sub)
        stats = svc.get_folder_stats(alice, root)
        assert (stats.total_docs, stats.total_folders, stats.estimated_words) == (2, 0, 120)

    def test_stats_for_doc_or_invisible_folder(self, svc, alice, bob):
        doc = svc.create(alice, "doc", None, "D")
        folder = svc.create(alice, "folder", None, "Private")
        assert svc.get_folder_stats(alice, doc) is None
        assert svc.get_folder_stats(bob, folder) is None

    def test_custom_extractor(self, db, alice, bob, clock):
        svc = NodeService(db, clock=clock, extractor=lambda content: "x")
        root, _ = self._tree(svc, alice, bob, clock)
        assert svc.get_folder_stats(alice, root).estimated_words == 3

    def test_contributors(self, svc, alice, bob, clock):
        root, _ = self._tree(svc, alice, bob, clock)
        contributors = svc.get_folder_contributors(alice, root)
        assert [c.user_id for c in contributors] == [bob.subject, alice.subject]
        assert contributors[1].doc_count == 2
        assert len(svc.get_folder_contributors(alice, root, limit=1)) == 1

    def test_descendants(self, svc, alice, bob, clock):
        root, sub = self._tree(svc, alice, bob, clock)
        toc = svc.get_descendants(alice, root)
        assert [item["title"] for item in toc] == ["A", "B", "Sub"]
        assert toc[2]["children"][0]["title"] == "C"
        assert toc[2]["children"][0]["depth"] == 1
        assert svc.get_descendants(alice, root, max_depth=0)[2]["children"] == []
        assert svc.get_descendants(None, root) == []


class TestSearch:

    def test_ranking_example(self, svc, alice, clock):
        svc.create(alice, "doc", None, "Annual Budget")
        clock.advance(10)
        svc.create(alice, "doc", None, "Q1 Notes")
        clock.advance(10)
        svc.create(alice, "doc", None, "Budget 2024")
        titles = [n.title for n in svc.search(alice, "budget")]
        assert titles == ["Budget 2024", "Annual Budget"]

    def test_personal_plus_one_org(self, svc, alice, bob):
        svc.create(alice, "doc", None, "Plan mine")
        svc.create(bob, "doc", None, "Plan org", org_id="org-1")
        svc.create(bob, "doc", None, "Plan elsewhere", org_id="org-2")
        svc.create(bob, "doc", None, "Plan bob private")
        svc.create(alice, "folder", None, "Plan folder")
        titles = {n.title for n in svc.search(alice, "plan", org_id="org-1")}
        assert titles == {"Plan mine", "Plan org"}

    def test_deleted_docs_excluded(self, svc, alice):
        doc = svc.create(alice, "doc", None, "Budget")
        svc.remove(alice, doc)
        assert svc.search(alice, "budget") == []

    def test_empty_query_returns_recent(self, svc, alice, clock):
        for i in range(12):
            svc.create(alice, "doc", None, f"Doc {i}")
            clock.advance(1)
        result = svc.search(alice, "")
        assert len(result) == 10
        assert result[0].title == "Doc 11"
