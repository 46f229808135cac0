"""Tests for HierarchyService: breadcrumbs, descendants, cascading delete, move."""

from unittest.mock import patch

import pytest

from assetfeed.exceptions import NodeNotFoundError, ValidationError
from assetfeed.models import AssetNode, FolderSyndication
from assetfeed.services.hierarchy_service import MAX_TREE_DEPTH, HierarchyService
from assetfeed.services.payload_store import PayloadStore
from tests.conftest import make_file, make_folder


@pytest.fixture()
def service(db, tmp_path):
    return HierarchyService(db, PayloadStore(str(tmp_path)))


@pytest.fixture()
def tree(db):
    """A/B/C folders with one file in each level, plus a sibling folder D."""
    a = make_folder(db, "A")
    b = make_folder(db, "B", parent_id=a.id)
    c = make_folder(db, "C", parent_id=b.id)
    d = make_folder(db, "D")
    fa = make_file(db, "a.txt", parent_id=a.id)
    fb = make_file(db, "b.txt", parent_id=b.id)
    fc = make_file(db, "c.txt", parent_id=c.id)
    return {"A": a.id, "B": b.id, "C": c.id, "D": d.id, "fa": fa.id, "fb": fb.id, "fc": fc.id}


class TestBreadcrumb:

    def test_root_only(self, service):
        crumbs = service.resolve_breadcrumb("root")
        assert [(c.id, c.name, c.is_folder) for c in crumbs] == [("root", "My Drive", True)]

    def test_path_from_root_to_node(self, service, tree):
        crumbs = service.resolve_breadcrumb(tree["fc"])
        assert [c.id for c in crumbs] == ["root", tree["A"], tree["B"], tree["C"], tree["fc"]]
        assert crumbs[-1].is_folder is False
        assert all(c.is_folder for c in crumbs[:-1])

    def test_unknown_node_raises(self, service):
        with pytest.raises(NodeNotFoundError):
            service.resolve_breadcrumb("missing")

    def test_corrupt_cycle_terminates(self, db, service):
        x = make_folder(db, "X")
        y = make_folder(db, "Y", parent_id=x.id)
        # Force a cycle X -> Y -> X behind the service's back.
        x.parent_id = y.id
        db.commit()
        crumbs = service.resolve_breadcrumb(y.id)
        assert crumbs[0].id == "root"
        assert len(crumbs) == 3


class TestDescendants:

    def test_closure(self, service, tree):
        ids = set(service.collect_descendant_ids(tree["A"]))
        assert ids == {tree["B"], tree["C"], tree["fa"], tree["fb"], tree["fc"]}

    def test_fixed_point(self, service, tree):
        closure = set(service.collect_descendant_ids(tree["A"]))
        for node_id in closure:
            assert set(service.collect_descendant_ids(node_id)) <= closure

    def test_childless_folder_is_empty(self, service, tree):
        assert service.collect_descendant_ids(tree["D"]) == []


class TestDeleteSubtree:

    def test_removes_everything_below(self, db, service, tree):
        db.add(FolderSyndication(folder_id=tree["B"], include_folder=True))
        db.commit()

        removed = service.delete_subtree(tree["A"])

        assert removed == 6
        remaining = {n.id for n in db.query(AssetNode).all()}
        assert remaining == {tree["D"]}
        assert db.query(FolderSyndication).count() == 0

    def test_no_orphans(self, db, service, tree):
        service.delete_subtree(tree["B"])
        ids = {n.id for n in db.query(AssetNode).all()}
        for node in db.query(AssetNode).all():
            assert node.parent_id is None or node.parent_id in ids

    def test_releases_payloads(self, db, service, tmp_path):
        folder = make_folder(db, "P")
        payload = tmp_path / "f.mp3"
        payload.write_bytes(b"abc")
        make_file(db, "f.mp3", parent_id=folder.id, file_path=str(payload))

        service.delete_subtree(folder.id)
        assert not payload.exists()

    def test_missing_payload_does_not_abort(self, db, service, tmp_path):
        folder = make_folder(db, "P")
        make_file(db, "gone.mp3", parent_id=folder.id, file_path=str(tmp_path / "gone.mp3"))
        assert service.delete_subtree(folder.id) == 2

    def test_idempotent(self, service, tree):
        service.delete_subtree(tree["A"])
        assert service.delete_subtree(tree["A"]) == 0


class TestDeleteNode:

    def test_file(self, db, service, tree):
        assert service.delete_node(tree["fa"]) == 1
        assert db.query(AssetNode).filter(AssetNode.id == tree["fa"]).first() is None

    def test_unknown(self, service):
        with pytest.raises(NodeNotFoundError):
            service.delete_node("missing")


class TestMove:

    def test_move_file_to_folder(self, service, tree):
        node = service.move_node(tree["fa"], tree["D"])
        assert node.parent_id == tree["D"]

    def test_move_to_root(self, service, tree):
        node = service.move_node(tree["B"], "root")
        assert node.parent_id is None

    def test_move_into_itself_rejected(self, service, tree):
        with pytest.raises(ValidationError):
            service.move_node(tree["A"], tree["A"])

    def test_move_into_descendant_rejected_and_tree_unchanged(self, db, service, tree):
        with pytest.raises(ValidationError):
            service.move_node(tree["A"], tree["C"])
        db.expire_all()
        assert db.get(AssetNode, tree["A"]).parent_id is None
        assert db.get(AssetNode, tree["C"]).parent_id == tree["B"]

    def test_move_into_file_rejected(self, service, tree):
        with pytest.raises(ValidationError):
            service.move_node(tree["B"], tree["fa"])

    def test_unknown_target(self, service, tree):
        with pytest.raises(NodeNotFoundError):
            service.move_node(tree["fa"], "missing")



class TestDeepChains:

    def test_breadcrumb_stops_on_chain_deeper_than_limit(self, db, service):
        depth = MAX_TREE_DEPTH + 5
        ids = [f"deep-{i}" for i in range(depth)]
        db.add_all([
            AssetNode(
                id=node_id,
                name=f"level {i}",
                is_folder=True,
                parent_id=ids[i - 1] if i else None,
                primary_type="other",
                format="folder",
                mime_type="application/x-folder",
                tags=[],
            )
            for i, node_id in enumerate(ids)
        ])
        db.commit()

        crumbs = service.resolve_breadcrumb(ids[-1])

        assert len(crumbs) == MAX_TREE_DEPTH + 1
        assert crumbs[0].id == "root"
        assert crumbs[-1].id == ids[-1]


class TestPayloadReleaseFailure:

    def test_unlink_error_is_logged_and_rows_still_removed(self, db, service, tmp_path):
        folder = make_folder(db, "P")
        sub = make_folder(db, "S", parent_id=folder.id)
        payload = tmp_path / "locked.mp3"
        payload.write_bytes(b"abc")
        make_file(db, "locked.mp3", parent_id=sub.id, file_path=str(payload))
        make_file(db, "other.txt", parent_id=folder.id)

        with patch.object(service.payloads, "delete", side_effect=OSError("device busy")) as delete:
            removed = service.delete_subtree(folder.id)

        assert delete.called
        assert removed == 4
        assert db.query(AssetNode).count() == 0
        assert payload.exists()
