import pytest
from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient

from app.api.deps import require_event_role
from app.core.exceptions import Forbidden, NotFound, ReviewServiceError
from app.core.permissions import EventAccess, authorize, resolve_effective_roles
from app.crud import event_roles
from app.db.database import get_db
from app.main import review_service_error_handler
from app.models import ALL_EVENT_ROLES, EventRoleType


def test_admin_holds_every_event_role(db, admin, event):
    access = resolve_effective_roles(db, admin.id, event.id)
    assert access.is_admin
    assert access.roles == ALL_EVENT_ROLES
    assert access.has_any(EventRoleType.CHAIR)


def test_roles_come_from_the_role_store(db, chair, event):
    access = resolve_effective_roles(db, chair.id, event.id)
    assert not access.is_admin
    assert access.roles == frozenset({"chair"})
    assert access.has_any(EventRoleType.CHAIR, EventRoleType.REVIEWER)
    assert not access.has_any(EventRoleType.REVIEWER)


def test_roles_are_scoped_to_one_event(db, chair, event_factory):
    other = event_factory("Other Conference")
    access = resolve_effective_roles(db, chair.id, other.id)
    assert access.roles == frozenset()
    with pytest.raises(Forbidden):
        access.require()


def test_authorize_rejects_missing_role(db, reviewer, event):
    with pytest.raises(Forbidden) as excinfo:
        authorize(db, reviewer.id, event.id, [EventRoleType.CHAIR])
    assert excinfo.value.context["required"] == ["chair"]


def test_revoked_role_is_gone_on_next_resolution(db, reviewer, event):
    assert authorize(db, reviewer.id, event.id, [EventRoleType.REVIEWER])
    assert event_roles.revoke_role(db, event.id, reviewer.id, EventRoleType.REVIEWER)
    with pytest.raises(Forbidden):
        authorize(db, reviewer.id, event.id, [EventRoleType.REVIEWER])


def test_grant_is_idempotent(db, reviewer, event):
    assert event_roles.grant_role(db, event.id, reviewer.id, EventRoleType.REVIEWER) is False
    assert event_roles.get_roles(db, event.id, reviewer.id) == {"reviewer"}


def test_require_event_mismatch_is_not_found():
    access = EventAccess(user_id=1, event_id=1, roles=frozenset({"chair"}))
    with pytest.raises(NotFound):
        access.require_event(2)


@pytest.fixture
def gate_client(db):
    gate_app = FastAPI()
    gate_app.add_exception_handler(ReviewServiceError, review_service_error_handler)

    @gate_app.get("/events/{event_id}/chair-only")
    def chair_only(access: EventAccess = Depends(require_event_role(EventRoleType.CHAIR))):
        return {"event_id": access.event_id, "roles": sorted(access.roles)}

    @gate_app.post("/by-body")
    def by_body(access: EventAccess = Depends(require_event_role())):
        return {"event_id": access.event_id}

    @gate_app.get("/submissions/{submission_id}/owner-event")
    def by_submission(access: EventAccess = Depends(require_event_role())):
        return {"event_id": access.event_id}

    @gate_app.get("/no-event")
    def no_event(access: EventAccess = Depends(require_event_role())):
        return {"event_id": access.event_id}

    def _get_db():
        yield db

    gate_app.dependency_overrides[get_db] = _get_db
    return TestClient(gate_app)


def test_gate_uses_path_event_id(gate_client, chair, event, auth_headers):
    response = gate_client.get(f"/events/{event.id}/chair-only", headers=auth_headers(chair))
    assert response.status_code == 200
    assert response.json() == {"event_id": event.id, "roles": ["chair"]}


def test_gate_forbids_without_role(gate_client, reviewer, event, auth_headers):
    response = gate_client.get(f"/events/{event.id}/chair-only", headers=auth_headers(reviewer))
    assert response.status_code == 403
    assert response.json()["error"] == "Forbidden"


def test_gate_admin_bypass(gate_client, admin, event, auth_headers):
    response = gate_client.get(f"/events/{event.id}/chair-only", headers=auth_headers(admin))
    assert response.status_code == 200
    assert "chair" in response.json()["roles"]


def test_gate_reads_event_id_from_json_body(gate_client, reviewer, event, auth_headers):
    response = gate_client.post("/by-body", json={"event_id": event.id}, headers=auth_headers(reviewer))
    assert response.status_code == 200
    assert response.json() == {"event_id": event.id}


def test_gate_resolves_event_through_submission(gate_client, author, submission, event, auth_headers):
    response = gate_client.get(f"/submissions/{submission.id}/owner-event", headers=auth_headers(author))
    assert response.status_code == 200
    assert response.json() == {"event_id": event.id}


def test_gate_unknown_submission_is_not_found(gate_client, author, auth_headers):
    response = gate_client.get("/submissions/9999/owner-event", headers=auth_headers(author))
    assert response.status_code == 404


def test_gate_without_event_id_is_bad_request(gate_client, author, auth_headers):
    response = gate_client.get("/no-event", headers=auth_headers(author))
    assert response.status_code == 400
    assert response.json()["error"] == "Event ID required"


def test_gate_rejects_bad_token(gate_client, event):
    response = gate_client.get(f"/events/{event.id}/chair-only", headers={"Authorization": "Bearer nope"})
    assert response.status_code == 401
