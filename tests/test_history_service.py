# tests/test_history_service.py
"""Unit tests for the status history ledger."""

import pytest
from datetime import date, datetime
from app.errors import NotFoundError, ValidationError
from app.models.status import StatusCode
from app.services import facility_service
from app.services.history_service import append_entry, bed_history, query_history
from app.services.sequence_service import HISTORY_COUNTER, next_value
from app.services.transition_service import TransitionContext, transition_bed
from app.services.visibility import Caller, Role


def add_entry(db, bed_id, service_id, at, status_id=StatusCode.OCCUPIED,
              previous_status_id=StatusCode.FREE, actor="u1"):
    return append_entry(db, bed_id=bed_id, service_id=service_id, status_id=status_id,
                        previous_status_id=previous_status_id, sub_status_id=None,
                        actor=actor, timestamp=at)


class TestAppend:
    def test_ids_strictly_increase(self, db, ward, make_beds):
        bed_id = make_beds(ward["medicine"])[0]
        ids = [add_entry(db, bed_id, ward["medicine"], datetime(2026, 1, 1, 9, i)).id for i in range(5)]
        assert ids == sorted(ids)
        assert len(set(ids)) == 5

    def test_allocated_id_is_never_reused(self, db, ward, make_beds):
        bed_id = make_beds(ward["medicine"])[0]
        first = add_entry(db, bed_id, ward["medicine"], datetime(2026, 1, 1, 9, 0)).id
        burned = next_value(db.get_bind(), HISTORY_COUNTER)     # allocated, then the write "failed"
        second = add_entry(db, bed_id, ward["medicine"], datetime(2026, 1, 1, 9, 5)).id
        assert first < burned < second

    def test_entry_records_transition(self, db, ward, make_beds):
        bed_id = make_beds(ward["medicine"])[0]
        transition_bed(db, bed_id, StatusCode.OCCUPIED, TransitionContext(actor="nurse-7"))
        transition_bed(db, bed_id, StatusCode.OUT_OF_SERVICE, TransitionContext(actor="tech-2"))

        newest, oldest = bed_history(db, bed_id)
        assert (oldest.previous_status_id, oldest.status_id) == (StatusCode.FREE, StatusCode.OCCUPIED)
        assert (newest.previous_status_id, newest.status_id) == (StatusCode.OCCUPIED, StatusCode.OUT_OF_SERVICE)
        assert newest.actor == "tech-2"


class TestQuery:
    def test_newest_first_with_id_tiebreak(self, db, ward, make_beds):
        bed_id = make_beds(ward["medicine"])[0]
        same = datetime(2026, 2, 1, 12, 0)
        a = add_entry(db, bed_id, ward["medicine"], same).id
        b = add_entry(db, bed_id, ward["medicine"], same).id
        c = add_entry(db, bed_id, ward["medicine"], datetime(2026, 2, 1, 8, 0)).id

        page = query_history(db)
        assert [e.id for e in page.items] == [b, a, c]

    def test_date_range_is_inclusive_of_whole_days(self, db, ward, make_beds):
        bed_id = make_beds(ward["medicine"])[0]
        sid = ward["medicine"]
        add_entry(db, bed_id, sid, datetime(2026, 2, 1, 0, 0))
        add_entry(db, bed_id, sid, datetime(2026, 2, 1, 23, 59, 59))
        add_entry(db, bed_id, sid, datetime(2026, 2, 2, 0, 0))
        add_entry(db, bed_id, sid, datetime(2026, 1, 31, 23, 59, 59))

        page = query_history(db, start=date(2026, 2, 1), end=date(2026, 2, 1))
        assert page.total == 2
        assert all(e.timestamp.date() == date(2026, 2, 1) for e in page.items)

    def test_datetime_bounds_are_used_as_given(self, db, ward, make_beds):
        bed_id = make_beds(ward["medicine"])[0]
        sid = ward["medicine"]
        add_entry(db, bed_id, sid, datetime(2026, 2, 1, 9, 0))
        add_entry(db, bed_id, sid, datetime(2026, 2, 1, 15, 0))
        page = query_history(db, start=datetime(2026, 2, 1, 10, 0))
        assert page.total == 1

    def test_filters_combine(self, db, ward, make_beds):
        med_bed = make_beds(ward["medicine"])[0]
        surg_bed = make_beds(ward["surgery"])[0]
        at = datetime(2026, 2, 1, 10, 0)
        add_entry(db, med_bed, ward["medicine"], at, actor="alice")
        add_entry(db, med_bed, ward["medicine"], at, status_id=StatusCode.MAINTENANCE, actor="bob")
        add_entry(db, surg_bed, ward["surgery"], at, actor="alice")

        assert query_history(db, actor="alice").total == 2
        assert query_history(db, service_id=ward["surgery"]).total == 1
        assert query_history(db, bed_id=med_bed, status_id=StatusCode.MAINTENANCE).total == 1
        assert query_history(db, bed_id=med_bed, actor="carol").total == 0

    def test_pagination(self, db, ward, make_beds):
        bed_id = make_beds(ward["medicine"])[0]
        for minute in range(7):
            add_entry(db, bed_id, ward["medicine"], datetime(2026, 2, 1, 10, minute))
        page = query_history(db, page=2, limit=3)
        assert page.total == 7
        assert page.total_pages == 3
        assert [e.timestamp.minute for e in page.items] == [3, 2, 1]

    @pytest.mark.parametrize("page,limit", [(0, 10), (1, 0), (1, 101)])
    def test_bad_page_arguments(self, db, page, limit):
        with pytest.raises(ValidationError):
            query_history(db, page=page, limit=limit)


class TestBedHistory:
    def test_unknown_bed(self, db, ward):
        with pytest.raises(NotFoundError):
            bed_history(db, "MEDE-01-99")

    def test_entries_survive_soft_delete(self, db, ward, make_beds):
        bed_id = make_beds(ward["medicine"])[0]
        transition_bed(db, bed_id, StatusCode.OCCUPIED, TransitionContext(actor="u1"))
        facility_service.soft_delete_bed(db, bed_id)

        with pytest.raises(NotFoundError):
            bed_history(db, bed_id)
        assert query_history(db, bed_id=bed_id).total == 1

    def test_scoped_caller(self, db, ward, make_beds):
        bed_id = make_beds(ward["surgery"])[0]
        transition_bed(db, bed_id, StatusCode.OCCUPIED, TransitionContext(actor="u1"))
        caller = Caller(actor="nurse", role=Role.USER, authorized_services=frozenset({ward["medicine"]}))
        assert bed_history(db, bed_id, caller=caller) == []
