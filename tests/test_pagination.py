"""
Tests for cursor feeds and offset page accumulation
"""

import pytest

from winedash.pagination import CursorFeed, PageAccumulator, clamp_page, page_window


def make_fetch(pages):
    """Serve ``pages`` keyed by the cursor that requests them; records every call."""
    calls = []

    def fetch(cursor):
        calls.append(cursor)
        return pages[cursor]

    return fetch, calls


PAGES = {
    None: ([{"id": 1}, {"id": 2}], "c1", True, 5),
    "c1": ([{"id": 3}, {"id": 4}], "c2", True, 5),
    "c2": ([{"id": 5}], None, False, 5),
}


class TestCursorFeed:
    def test_load_until_exhausted_keeps_every_item_once(self):
        feed = CursorFeed()
        fetch, calls = make_fetch(PAGES)
        feed.load_first("Portugal", fetch)
        while feed.can_load_more:
            feed.load_more(fetch)
        assert [item["id"] for item in feed.items] == [1, 2, 3, 4, 5]
        assert calls == [None, "c1", "c2"]
        assert feed.total == 5
        assert feed.has_next is False

    def test_load_more_after_exhaustion_is_noop(self):
        feed = CursorFeed()
        fetch, calls = make_fetch({None: ([{"id": 1}], None, False, 1)})
        feed.load_first("Chile", fetch)
        assert feed.load_more(fetch) == 0
        assert calls == [None]

    def test_duplicates_across_pages_are_skipped(self):
        pages = {
            None: ([{"id": 1}, {"id": 2}], "c1", True, None),
            "c1": ([{"id": 2}, {"id": 3}], None, False, None),
        }
        feed = CursorFeed()
        fetch, _ = make_fetch(pages)
        feed.load_first("US", fetch)
        assert feed.load_more(fetch) == 1
        assert [item["id"] for item in feed.items] == [1, 2, 3]

    def test_has_next_without_cursor_stops(self):
        feed = CursorFeed()
        feed.reset("Spain")
        feed.absorb([{"id": 1}], None, True)
        assert feed.can_load_more is False

    def test_new_key_replaces_items(self):
        feed = CursorFeed()
        fetch, _ = make_fetch(PAGES)
        feed.load_first("Portugal", fetch)
        other, _ = make_fetch({None: ([{"id": 9}], None, False, 1)})
        feed.load_first("Italy", other)
        assert feed.key == "Italy"
        assert [item["id"] for item in feed.items] == [9]

    def test_failed_load_more_keeps_items(self):
        feed = CursorFeed()
        fetch, _ = make_fetch(PAGES)
        feed.load_first("Portugal", fetch)

        def broken(cursor):
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError):
            feed.load_more(broken)
        assert [item["id"] for item in feed.items] == [1, 2]
        assert feed.cursor == "c1"

    def test_failed_first_load_leaves_empty_feed(self):
        feed = CursorFeed()
        fetch, _ = make_fetch(PAGES)
        feed.load_first("Portugal", fetch)

        def broken(cursor):
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError):
            feed.load_first("Italy", broken)
        assert feed.key == "Italy"
        assert feed.items == []
        assert feed.can_load_more is False
        assert feed.failed is True

    def test_failure_flag_persists_until_reload_succeeds(self):
        feed = CursorFeed()

        def broken(cursor):
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError):
            feed.load_first("Portugal", broken)
        # a later render for the same key still sees the failure, not an empty result
        assert feed.key == "Portugal"
        assert feed.failed is True

        fetch, _ = make_fetch(PAGES)
        feed.load_first(feed.key, fetch)
        assert feed.failed is False
        assert [item["id"] for item in feed.items] == [1, 2]

    def test_failed_load_more_does_not_mark_feed_failed(self):
        feed = CursorFeed()
        fetch, _ = make_fetch(PAGES)
        feed.load_first("Portugal", fetch)

        def broken(cursor):
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError):
            feed.load_more(broken)
        assert feed.failed is False
        assert feed.can_load_more is True

    def test_reset_clears_failure(self):
        feed = CursorFeed(key="x", failed=True)
        feed.reset()
        assert feed.failed is False

    def test_objects_with_id_attribute(self):
        class Row:
            def __init__(self, id):
                self.id = id

        feed = CursorFeed()
        feed.reset("x")
        assert feed.absorb([Row(1), Row(1), Row(2)], None, False) == 2


class TestPageAccumulator:
    def test_stops_at_first_empty_page(self):
        acc = PageAccumulator()
        assert acc.absorb(1, ["a", "b"]) == 2
        assert acc.absorb(2, ["c"]) == 1
        assert acc.absorb(3, []) == 0
        assert acc.exhausted is True
        assert acc.items == ["a", "b", "c"]
        assert acc.next_page == 3

    def test_out_of_order_page_ignored(self):
        acc = PageAccumulator()
        acc.absorb(1, ["a"])
        assert acc.absorb(3, ["z"]) == 0
        assert acc.items == ["a"]
        assert acc.pages_loaded == 1


@pytest.mark.parametrize(
    "page,pages,expected",
    [(1, 1, (False, False)), (1, 3, (False, True)), (2, 3, (True, True)), (3, 3, (True, False)), (1, 0, (False, False))],
)
def test_page_window(page, pages, expected):
    assert page_window(page, pages) == expected


def test_clamp_page():
    assert clamp_page(0, 5) == 1
    assert clamp_page(9, 5) == 5
    assert clamp_page(3, 0) == 1
