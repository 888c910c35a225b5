"""
Tests for services.closure_registry: half-open overlap, create/list/delete.
"""
from datetime import date, datetime

import pytest

from tablebook.core.errors import InvalidRangeError
from tablebook.services.closure_registry import (
    create_closure,
    create_day_closure,
    delete_closure,
    is_blocked,
    list_closures,
    overlaps,
)
from tablebook.services.slot_calendar import SlotCalendar


def at(hh: int, mm: int = 0) -> datetime:
    return datetime(2026, 10, 20, hh, mm)


class TestIsBlocked:
    def test_touching_closure_does_not_block(self, store):
        with store.session() as db:
            create_closure(db, at(11), at(12), "Private event")
        with store.session() as db:
            assert not is_blocked(db, at(10), at(11))
            assert not is_blocked(db, at(12), at(13))

    def test_contained_and_partial_overlap_block(self, store):
        with store.session() as db:
            create_closure(db, at(10), at(11), "Staff meeting")
        with store.session() as db:
            assert is_blocked(db, at(10, 30), at(10, 45))
            assert is_blocked(db, at(9), at(10, 1))
            assert is_blocked(db, at(9), at(12))

    def test_no_closures_never_blocks(self, store):
        with store.session() as db:
            assert not is_blocked(db, at(10), at(22))

    def test_overlaps_is_symmetric(self):
        assert overlaps(at(10), at(11), at(10, 30), at(12))
        assert overlaps(at(10, 30), at(12), at(10), at(11))
        assert not overlaps(at(10), at(11), at(11), at(12))


class TestCreateAndDelete:
    @pytest.mark.parametrize("start,end", [(at(12), at(11)), (at(12), at(12))])
    def test_invalid_range(self, store, start, end):
        with pytest.raises(InvalidRangeError):
            with store.session() as db:
                create_closure(db, start, end, "bad")
        with store.session() as db:
            assert list_closures(db) == []

    def test_blank_reason_defaults(self, store):
        with store.session() as db:
            row = create_closure(db, at(10), at(11), "  ")
            assert row.reason == "Closed"

    def test_day_closure_spans_opening_hours(self, store, policy):
        with store.session() as db:
            row = create_day_closure(db, SlotCalendar(policy), date(2026, 10, 20), "Holiday")
            assert row.start_ts == at(10)
            assert row.end_ts == at(22)

    def test_list_newest_start_first(self, store):
        with store.session() as db:
            create_closure(db, at(10), at(11), "a")
            create_closure(db, at(15), at(16), "b")
        with store.session() as db:
            assert [c.reason for c in list_closures(db)] == ["b", "a"]

    def test_delete_is_idempotent(self, store):
        with store.session() as db:
            closure_id = create_closure(db, at(10), at(11), "a").id
        with store.session() as db:
            assert delete_closure(db, closure_id) is True
        with store.session() as db:
            assert delete_closure(db, closure_id) is False
            assert not is_blocked(db, at(10), at(11))
