# tests/test_visibility.py
"""Unit tests for role-based visibility filtering."""

import pytest
from datetime import datetime
from app.errors import NotFoundError
from app.models.bed import Bed
from app.models.status import StatusCode
from app.services import facility_service
from app.services.history_service import query_history
from app.services.task_service import list_tasks
from app.services.transition_service import TransitionContext, transition_bed
from app.services.visibility import ROLE_SCOPES, Caller, Role, Target, filter_for_role

SLOT = datetime(2026, 3, 2, 10, 0)


def nurse(*services, role=Role.USER):
    return Caller(actor="nurse", role=role, authorized_services=frozenset(services))


@pytest.fixture
def activity(db, ward, make_beds):
    """Beds in both services, with cleaning and maintenance activity."""
    med = make_beds(ward["medicine"], count=2)
    surg = make_beds(ward["surgery"], count=2)
    transition_bed(db, med[0], StatusCode.TO_CLEAN, TransitionContext(actor="u1"))
    transition_bed(db, med[0], StatusCode.FREE, TransitionContext(actor="u1"))
    transition_bed(db, surg[0], StatusCode.MAINTENANCE, TransitionContext(actor="u1", maintenance_at=SLOT))
    transition_bed(db, surg[1], StatusCode.OCCUPIED, TransitionContext(actor="u1"))
    return {"med": med, "surg": surg}


class TestRoleTable:
    def test_every_role_has_a_scope(self):
        assert set(ROLE_SCOPES) == set(Role)

    def test_unknown_role_name_is_rejected(self):
        with pytest.raises(ValueError):
            Role("Superuser")

    def test_internal_caller_is_unfiltered(self, db, activity):
        assert filter_for_role(None, db.query(Bed), Target.BED).count() == 4


class TestServiceScope:
    def test_bed_of_other_service_cannot_be_edited(self, db, ward, activity):
        with pytest.raises(NotFoundError):
            facility_service.update_bed(db, activity["surg"][0], {"description": "x"}, nurse(ward["medicine"]))

    def test_scoped_caller_never_sees_other_services(self, db, ward, activity):
        caller = nurse(ward["medicine"])
        beds = facility_service.list_beds(db, caller=caller, limit=100).items
        assert {b.service_id for b in beds} == {ward["medicine"]}
        assert {e.service_id for e in query_history(db, caller=caller, limit=100).items} == {ward["medicine"]}
        assert {t.service_id for t in list_tasks(db, caller=caller, limit=100).items} == {ward["medicine"]}
        assert [s.id for s in facility_service.list_services(db, caller=caller)] == [ward["medicine"]]

    def test_explicit_filter_cannot_widen_scope(self, db, ward, activity):
        caller = nurse(ward["medicine"])
        page = facility_service.list_beds(db, caller=caller, service_id=ward["surgery"])
        assert page.total == 0

    @pytest.mark.parametrize("role", [Role.USER, Role.VIEWER])
    def test_empty_authorization_sees_nothing(self, db, ward, activity, role):
        caller = nurse(role=role)
        assert facility_service.list_beds(db, caller=caller).total == 0
        assert query_history(db, caller=caller).total == 0
        assert list_tasks(db, caller=caller).total == 0
        assert facility_service.list_services(db, caller=caller) == []
        assert facility_service.list_sectors(db, caller=caller) == []

    def test_sectors_follow_authorized_services(self, db, ward, activity):
        other = facility_service.create_sector(db, "Radiology")
        facility_service.create_service(db, "Imaging", other.id)
        sectors = facility_service.list_sectors(db, caller=nurse(ward["medicine"]))
        assert [s.id for s in sectors] == [ward["sector"]]

    @pytest.mark.parametrize("role", [Role.ADMIN, Role.MANAGER])
    def test_unscoped_roles_see_everything(self, db, activity, role):
        caller = Caller(actor="boss", role=role)
        assert facility_service.list_beds(db, caller=caller).total == 4


class TestStatusFocus:
    @pytest.mark.parametrize("role", [Role.CLEANING_AGENT, Role.CLEANING_MANAGER])
    def test_cleaning_roles_see_cleaning_history(self, db, activity, role):
        caller = Caller(actor="cleaner", role=role)
        entries = query_history(db, caller=caller, limit=100).items
        # TO_CLEAN itself and the step out of it
        assert len(entries) == 2
        assert all(StatusCode.TO_CLEAN in (e.status_id, e.previous_status_id) for e in entries)

    @pytest.mark.parametrize("role", [Role.TECHNICAL_AGENT, Role.TECHNICAL_MANAGER])
    def test_technical_roles_see_maintenance_beds(self, db, activity, role):
        caller = Caller(actor="tech", role=role)
        beds = facility_service.list_beds(db, caller=caller).items
        assert [b.id for b in beds] == [activity["surg"][0]]

    def test_explicit_status_filter_narrows_focus(self, db, activity):
        caller = Caller(actor="tech", role=Role.TECHNICAL_AGENT)
        assert facility_service.list_beds(db, caller=caller, status_id=StatusCode.OCCUPIED).total == 0

    @pytest.mark.parametrize("role", [Role.CLEANING_AGENT, Role.TECHNICAL_AGENT])
    def test_hidden_bed_cannot_be_edited(self, db, activity, role):
        bed_id = activity["med"][1]      # FREE, outside both status focuses
        caller = Caller(actor="agent", role=role)
        with pytest.raises(NotFoundError):
            facility_service.update_bed(db, bed_id, {"description": "x"}, caller)
        assert facility_service.get_bed(db, bed_id).description is None

    def test_bed_in_focus_can_be_edited(self, db, activity):
        caller = Caller(actor="tech", role=Role.TECHNICAL_AGENT)
        bed = facility_service.update_bed(db, activity["surg"][0], {"description": "pump"}, caller)
        assert bed.description == "pump"

    def test_status_focus_does_not_hide_services(self, db, ward, activity):
        caller = Caller(actor="cleaner", role=Role.CLEANING_AGENT)
        assert len(facility_service.list_services(db, caller=caller)) == 2
