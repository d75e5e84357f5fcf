import pytest

from agenda_clinica.models.appointment import CANCELLED
from agenda_clinica.models.client_plan import PLAN_ACTIVE, PLAN_COMPLETED, ClientPlan
from agenda_clinica.services.plans import apply_session_delta, next_session_number

from conftest import NEXT_MONDAY, add_appointment, auth


def _plan(total=5, completed=0):
    return ClientPlan(
        user_id=1,
        service_slug="limpeza-de-pele",
        service_title="Limpeza de Pele",
        total_sessions=total,
        completed_sessions=completed,
    )


@pytest.mark.parametrize(
    "completed, delta, expected, status",
    [
        (0, 1, 1, PLAN_ACTIVE),
        (4, 1, 5, PLAN_COMPLETED),
        (5, 1, 5, PLAN_COMPLETED),
        (1, -3, 0, PLAN_ACTIVE),
        (5, -1, 4, PLAN_ACTIVE),
    ],
)
def test_session_delta_is_clamped(completed, delta, expected, status):
    plan = apply_session_delta(_plan(completed=completed), delta)
    assert plan.completed_sessions == expected
    assert plan.status == status


def test_admin_creates_and_adjusts_plan(api, admin, client_user):
    body = {
        "user_id": client_user.id,
        "service_slug": "limpeza-de-pele",
        "service_title": "Limpeza de Pele",
        "total_sessions": 2,
    }
    created = api.post("/plans/", json=body, headers=auth(admin))
    assert created.status_code == 201, created.text
    plan = created.json()
    assert plan["completed_sessions"] == 0
    assert plan["status"] == PLAN_ACTIVE

    res = api.patch(f"/plans/{plan['id']}/sessions", json={"delta": 2}, headers=auth(admin))
    assert res.json()["completed_sessions"] == 2
    assert res.json()["status"] == PLAN_COMPLETED


def test_plan_needs_at_least_one_session(api, admin, client_user):
    body = {
        "user_id": client_user.id,
        "service_slug": "x",
        "service_title": "X",
        "total_sessions": 0,
    }
    assert api.post("/plans/", json=body, headers=auth(admin)).status_code == 422


def test_plan_for_unknown_client_is_404(api, admin):
    body = {"user_id": 999, "service_slug": "x", "service_title": "X", "total_sessions": 3}
    assert api.post("/plans/", json=body, headers=auth(admin)).status_code == 404


def test_clients_cannot_create_plans(api, client_user):
    body = {"user_id": client_user.id, "service_slug": "x", "service_title": "X", "total_sessions": 3}
    assert api.post("/plans/", json=body, headers=auth(client_user)).status_code == 403


def test_next_session_counts_booked_sessions(session, client_user):
    plan = _plan(total=3, completed=1)
    plan.user_id = client_user.id
    session.add(plan)
    session.commit()
    session.refresh(plan)

    assert next_session_number(session, plan) == 2

    add_appointment(session, client_user, NEXT_MONDAY, "10:00", plan_id=plan.id, session_number=2)
    assert next_session_number(session, plan) == 3

    # sessão cancelada não conta
    add_appointment(session, client_user, NEXT_MONDAY, "11:00", status=CANCELLED, plan_id=plan.id, session_number=3)
    assert next_session_number(session, plan) == 3

    add_appointment(session, client_user, NEXT_MONDAY, "12:00", plan_id=plan.id, session_number=3)
    assert next_session_number(session, plan) is None


def test_next_session_endpoint_and_visibility(api, session, client_user, other_client):
    plan = _plan(total=5, completed=4)
    plan.user_id = client_user.id
    session.add(plan)
    session.commit()
    session.refresh(plan)

    res = api.get(f"/plans/{plan.id}/next-session", headers=auth(client_user))
    assert res.status_code == 200
    assert res.json() == {
        "plan_id": plan.id,
        "total_sessions": 5,
        "completed_sessions": 4,
        "next_session_number": 5,
    }

    assert api.get(f"/plans/{plan.id}/next-session", headers=auth(other_client)).status_code == 404

    assert [p["id"] for p in api.get("/plans/", headers=auth(client_user)).json()] == [plan.id]
    assert api.get("/plans/", headers=auth(other_client)).json() == []
