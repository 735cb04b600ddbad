# tests/test_task_service.py
"""Unit tests for the cleaning / maintenance task queue."""

import pytest
from datetime import datetime
from app.errors import NotFoundError, ValidationError
from app.models.status import StatusCode
from app.services import facility_service
from app.services.task_service import create_task, get_task, list_tasks, mark_updated
from app.services.transition_service import TransitionContext, transition_bed
from app.services.visibility import Caller, Role

SLOT = datetime(2026, 3, 2, 10, 0)


@pytest.fixture
def queue(db, ward, make_beds):
    """Three open tasks: deep clean on MEDE-01-01, standard clean and maintenance on SURG-01-0x."""
    med = make_beds(ward["medicine"])[0]
    surg_a, surg_b = make_beds(ward["surgery"], count=2)
    transition_bed(db, med, StatusCode.TO_CLEAN,
                   TransitionContext(actor="u1", sub_status_id=StatusCode.DEEP_CLEANING))
    transition_bed(db, surg_a, StatusCode.TO_CLEAN,
                   TransitionContext(actor="u1", sub_status_id=StatusCode.STANDARD_CLEANING))
    transition_bed(db, surg_b, StatusCode.MAINTENANCE, TransitionContext(actor="u1", maintenance_at=SLOT))
    return {"med": med, "surg_a": surg_a, "surg_b": surg_b}


def task_for(db, bed_id):
    return next(t for t in list_tasks(db, limit=100).items if t.bed_id == bed_id)


class TestCreate:
    def test_rejects_kind_without_task(self, db, ward):
        with pytest.raises(ValidationError):
            create_task(db, bed_id="MEDE-01-01", service_id=ward["medicine"],
                        service_name="Medecine", kind=StatusCode.OCCUPIED)

    def test_new_task_defaults(self, db, ward):
        task = create_task(db, bed_id="MEDE-01-01", service_id=ward["medicine"],
                           service_name="Medecine", kind=StatusCode.MAINTENANCE)
        assert task.done is False
        assert task.urgent is False
        assert task.completed_at is None
        assert task.created_at is not None


class TestList:
    def test_filter_by_kind(self, db, queue):
        cleaning = list_tasks(db, kinds=[StatusCode.TO_CLEAN])
        assert cleaning.total == 2
        assert {t.bed_id for t in cleaning.items} == {queue["med"], queue["surg_a"]}

    def test_filter_by_flags(self, db, queue):
        mark_updated(db, task_for(db, queue["med"]).id, {"done": True})
        mark_updated(db, task_for(db, queue["surg_b"]).id, {"urgent": True})

        assert list_tasks(db, done=True).total == 1
        assert list_tasks(db, done=False).total == 2
        assert [t.bed_id for t in list_tasks(db, urgent=True).items] == [queue["surg_b"]]

    @pytest.mark.parametrize("term,expected", [
        ("deep", {"med"}),
        ("surgery", {"surg_a", "surg_b"}),
        ("maint", {"surg_b"}),
        ("MEDE-01-01", {"med"}),
    ])
    def test_search(self, db, queue, term, expected):
        found = {t.bed_id for t in list_tasks(db, search=term).items}
        assert found == {queue[key] for key in expected}

    def test_sort_by_bed(self, db, queue):
        ids = [t.bed_id for t in list_tasks(db, sort_by="bed_id", sort_order="asc").items]
        assert ids == sorted(ids)

    def test_unknown_sort_field(self, db, queue):
        with pytest.raises(ValidationError):
            list_tasks(db, sort_by="password")

    def test_technical_agent_sees_maintenance_only(self, db, queue):
        caller = Caller(actor="tech", role=Role.TECHNICAL_AGENT)
        page = list_tasks(db, caller=caller)
        assert [t.kind for t in page.items] == [StatusCode.MAINTENANCE]

    def test_explicit_kind_cannot_widen_role_view(self, db, queue):
        caller = Caller(actor="tech", role=Role.TECHNICAL_AGENT)
        assert list_tasks(db, caller=caller, kinds=[StatusCode.TO_CLEAN]).total == 0


class TestMarkUpdated:
    def test_done_leaves_bed_untouched(self, db, queue):
        task = task_for(db, queue["med"])
        mark_updated(db, task.id, {"done": True, "completed_at": datetime(2026, 3, 2, 11, 0)})

        bed = facility_service.get_bed(db, queue["med"])
        assert bed.status_id == StatusCode.TO_CLEAN
        assert bed.sub_status_id == StatusCode.DEEP_CLEANING
        assert get_task(db, task.id).done is True

    def test_only_given_fields_change(self, db, queue):
        task = task_for(db, queue["surg_a"])
        updated = mark_updated(db, task.id, {"assignee": "Mrs Jones"})
        assert updated.assignee == "Mrs Jones"
        assert updated.done is False
        assert updated.category == StatusCode.STANDARD_CLEANING

    def test_recategorize(self, db, queue):
        task = task_for(db, queue["surg_a"])
        assert mark_updated(db, task.id, {"category": StatusCode.DEEP_CLEANING}).category == StatusCode.DEEP_CLEANING

    @pytest.mark.parametrize("patch", [
        {"bed_id": "X"},
        {"kind": StatusCode.FREE},
        {"done": None},
        {"category": StatusCode.OCCUPIED},
    ])
    def test_rejected_patches(self, db, queue, patch):
        task = task_for(db, queue["surg_a"])
        with pytest.raises(ValidationError):
            mark_updated(db, task.id, patch)

    def test_unknown_task(self, db, queue):
        with pytest.raises(NotFoundError):
            mark_updated(db, 9999, {"done": True})

    def test_hidden_task_is_not_found(self, db, ward, queue):
        caller = Caller(actor="nurse", role=Role.USER, authorized_services=frozenset({ward["medicine"]}))
        with pytest.raises(NotFoundError):
            mark_updated(db, task_for(db, queue["surg_a"]).id, {"done": True}, caller=caller)
