"""Tests for feed criteria parsing and asset-set resolution."""

from datetime import timedelta

import pytest

from assetfeed.exceptions import ValidationError
from assetfeed.services.feed_filter import (
    AllCriterion,
    FeedFilterEngine,
    FolderCriterion,
    TagCriterion,
    TypeCriterion,
    parse_criterion,
)
from tests.conftest import BASE_TIME, make_file, make_folder


@pytest.fixture()
def engine(db):
    return FeedFilterEngine(db)


class TestParseCriterion:

    def test_all_ignores_value(self):
        assert parse_criterion("all", "whatever") == AllCriterion()

    def test_each_kind(self):
        assert parse_criterion("folder", "abc") == FolderCriterion("abc")
        assert parse_criterion("type", "audio") == TypeCriterion("audio")
        assert parse_criterion("tag", " news ") == TagCriterion("news")

    @pytest.mark.parametrize("filter_type, value", [
        ("bogus", "x"),
        ("folder", ""),
        ("type", "podcast"),
        ("tag", None),
    ])
    def test_invalid(self, filter_type, value):
        with pytest.raises(ValidationError):
            parse_criterion(filter_type, value)


class TestResolve:

    def test_all_only_included_files(self, db, engine):
        included = make_file(db, "in.txt")
        make_file(db, "out.txt", include=False)
        make_folder(db, "F", include_in_feed=True)
        result = engine.resolve_asset_set(AllCriterion(), 20)
        assert [n.id for n in result] == [included.id]

    def test_order_by_effective_publish_date(self, db, engine):
        old = make_file(db, "old.txt", minutes=0)
        new = make_file(db, "new.txt", minutes=10)
        promoted = make_file(db, "promoted.txt", minutes=1, feed_publish_date=BASE_TIME + timedelta(days=1))
        result = engine.resolve_asset_set(AllCriterion(), 20)
        assert [n.id for n in result] == [promoted.id, new.id, old.id]

    def test_ties_broken_by_creation_timestamp(self, db, engine):
        publish = BASE_TIME + timedelta(days=2)
        first = make_file(db, "first.txt", minutes=0, feed_publish_date=publish)
        second = make_file(db, "second.txt", minutes=5, feed_publish_date=publish)
        result = engine.resolve_asset_set(AllCriterion(), 20)
        assert [n.id for n in result] == [second.id, first.id]

    def test_truncated_to_max_items(self, db, engine):
        for i in range(5):
            make_file(db, f"f{i}.txt", minutes=i)
        result = engine.resolve_asset_set(AllCriterion(), 3)
        assert [n.name for n in result] == ["f4.txt", "f3.txt", "f2.txt"]

    def test_folder_includes_whole_subtree(self, db, engine):
        top = make_folder(db, "Top")
        sub = make_folder(db, "Sub", parent_id=top.id)
        direct = make_file(db, "direct.txt", parent_id=top.id, minutes=1)
        nested = make_file(db, "nested.txt", parent_id=sub.id, minutes=2)
        make_file(db, "elsewhere.txt", minutes=3)

        result = engine.resolve_asset_set(FolderCriterion(top.id), 20)
        assert [n.id for n in result] == [nested.id, direct.id]

    def test_folder_set_is_all_set_within_subtree(self, db, engine):
        top = make_folder(db, "Top")
        sub = make_folder(db, "Sub", parent_id=top.id)
        make_file(db, "a.txt", parent_id=top.id, minutes=1)
        make_file(db, "b.txt", parent_id=sub.id, minutes=2, include=False)
        make_file(db, "c.txt", minutes=3)
        make_file(db, "d.txt", parent_id=sub.id, minutes=4)

        subtree = {top.id, sub.id}
        expected = [n.id for n in engine.resolve_asset_set(AllCriterion(), 100) if n.parent_id in subtree]
        actual = [n.id for n in engine.resolve_asset_set(FolderCriterion(top.id), 100)]
        assert actual == expected

    def test_unknown_folder_is_empty(self, db, engine):
        make_file(db, "a.txt")
        assert engine.resolve_asset_set(FolderCriterion("gone"), 20) == []

    def test_type(self, db, engine):
        song = make_file(db, "song.mp3", primary_type="audio", mime_type="audio/mpeg")
        make_file(db, "notes.txt")
        result = engine.resolve_asset_set(TypeCriterion("audio"), 20)
        assert [n.id for n in result] == [song.id]

    def test_tag_substring_per_element(self, db, engine):
        hit = make_file(db, "a.txt", tags=["weekly-news", "misc"])
        make_file(db, "b.txt", tags=["sports"])
        make_file(db, "c.txt", tags=[])
        result = engine.resolve_asset_set(TagCriterion("news"), 20)
        assert [n.id for n in result] == [hit.id]
