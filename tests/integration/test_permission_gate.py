# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Integration tests for the require_permission request gate."""

import pytest
from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from src.api.deps import (
    get_current_identity,
    get_db,
    get_settings,
    require_permission,
)
from src.config import Settings
from src.main import register_exception_handlers
from src.rbac.context import Ownership, SessionIdentity

# Owner of the addressed QR code, keyed by the code path parameter
QR_OWNERS: dict[str, Ownership] = {}


def qr_owner(request, db) -> Ownership | None:
    return QR_OWNERS.get(request.path_params["code"])


def build_app() -> FastAPI:
    app = FastAPI()
    register_exception_handlers(app)

    @app.get("/qr-codes/{code}")
    def read_code(
        code: str,
        identity: SessionIdentity = Depends(
            require_permission("qr_code", "read", resolve_owner=qr_owner)
        ),
    ) -> dict:
        return {"code": code, "user": identity.user_id}

    @app.delete("/qr-codes/{code}")
    def delete_code(
        code: str,
        identity: SessionIdentity = Depends(
            require_permission("qr_code", "delete", resolve_owner=qr_owner)
        ),
    ) -> dict:
        return {"deleted": code}

    @app.get("/analytics/scans")
    def read_scans(
        identity: SessionIdentity = Depends(
            require_permission("qr_analytics", "read")
        ),
    ) -> dict:
        return {"scans": []}

    @app.get("/groups/{group_id}/users")
    def read_group_users(
        group_id: int,
        identity: SessionIdentity = Depends(require_permission("group_users", "read")),
    ) -> dict:
        return {"users": []}

    return app


class UnavailableSession:
    """Session stand-in whose every query fails at the driver."""

    def _fail(self, *args, **kwargs):
        raise OperationalError("SELECT 1", {}, Exception("connection refused"))

    query = _fail
    get = _fail


@pytest.fixture
def gate_app(db_session):
    app = build_app()

    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    QR_OWNERS.clear()
    yield app
    QR_OWNERS.clear()


@pytest.fixture
def gate_client(gate_app):
    return TestClient(gate_app)


def test_anonymous_request_is_rejected(gate_client):
    response = gate_client.get("/qr-codes/abc")

    assert response.status_code == 401
    assert response.json()["_error"] == "AUTH_REQUIRED"


def test_group_member_may_read(gate_client, user_headers, teammate):
    QR_OWNERS["abc"] = Ownership(owner_id=teammate.id, owner_group_id=7)

    response = gate_client.get("/qr-codes/abc", headers=user_headers)

    assert response.status_code == 200


def test_outsider_is_denied(gate_client, outsider, headers_for, test_user):
    QR_OWNERS["abc"] = Ownership(owner_id=test_user.id, owner_group_id=7)

    response = gate_client.get("/qr-codes/abc", headers=headers_for(outsider))

    assert response.status_code == 403
    body = response.json()
    assert body["_error"] == "PERMISSION_DENIED"
    assert body["resource"] == "qr_code"
    assert body["action"] == "read"
    assert body["hint"]


def test_delete_requires_ownership(gate_client, test_user, user_headers, teammate):
    QR_OWNERS["mine"] = Ownership(owner_id=test_user.id, owner_group_id=7)
    QR_OWNERS["theirs"] = Ownership(owner_id=teammate.id, owner_group_id=7)

    assert gate_client.delete("/qr-codes/mine", headers=user_headers).status_code == 200
    theirs = gate_client.delete("/qr-codes/theirs", headers=user_headers)
    assert theirs.status_code == 403


def test_unresolved_owner_fails_closed(gate_client, user_headers):
    response = gate_client.delete("/qr-codes/unknown", headers=user_headers)

    assert response.status_code == 403


def test_admin_passes_without_ownership(gate_client, admin_headers):
    response = gate_client.delete("/qr-codes/unknown", headers=admin_headers)

    assert response.status_code == 200


def test_groupless_analytics_read(gate_client, groupless_user, headers_for):
    response = gate_client.get("/analytics/scans", headers=headers_for(groupless_user))

    assert response.status_code == 200


class TestStoreOutage:
    """The gate fails closed unless fail-open reads are enabled."""

    @pytest.fixture
    def outage_app(self, gate_app):
        def unavailable_db():
            yield UnavailableSession()

        gate_app.dependency_overrides[get_db] = unavailable_db
        gate_app.dependency_overrides[get_current_identity] = lambda: SessionIdentity(
            user_id="u-1", role="user", group_id=7
        )
        return gate_app

    def test_fails_closed_by_default(self, outage_app):
        client = TestClient(outage_app)

        response = client.get("/qr-codes/abc")

        assert response.status_code == 503
        assert response.json()["_error"] == "STORE_UNAVAILABLE"

    def test_fail_open_reads(self, outage_app):
        outage_app.dependency_overrides[get_settings] = lambda: Settings(
            fail_open_reads=True
        )
        client = TestClient(outage_app)

        assert client.get("/analytics/scans").status_code == 200
        assert client.get("/qr-codes/abc").status_code == 503
        assert client.get("/groups/7/users").status_code == 503

    def test_fail_open_reads_follow_configured_resources(self, outage_app):
        outage_app.dependency_overrides[get_settings] = lambda: Settings(
            fail_open_reads=True, fail_open_resources=["qr_code"]
        )
        client = TestClient(outage_app)

        assert client.get("/qr-codes/abc").status_code == 200
        assert client.delete("/qr-codes/abc").status_code == 503
        assert client.get("/analytics/scans").status_code == 503

    def test_fail_open_reads_disabled(self, outage_app):
        outage_app.dependency_overrides[get_settings] = lambda: Settings(
            fail_open_resources=["qr_code"]
        )
        client = TestClient(outage_app)

        assert client.get("/qr-codes/abc").status_code == 503
