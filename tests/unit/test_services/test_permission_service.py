# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Tests for permission_service."""

import pytest
from sqlalchemy.exc import OperationalError

from src.config import Settings
from src.exceptions import StoreUnavailableError
from src.models import PermissionRule, Role
from src.models.enums import Action, Scope
from src.rbac.context import SessionIdentity
from src.services import permission_service, permission_store
from src.services.permission_service import PermissionCheck


def _check(role="user", group_id=7, user_id="u-1", **kwargs) -> PermissionCheck:
    kwargs.setdefault("resource_type", "qr_code")
    kwargs.setdefault("action", Action.READ)
    return PermissionCheck(user_id=user_id, role=role, group_id=group_id, **kwargs)


def test_admin_bypass_without_any_rules(db_session):
    for role in ("admin", "Administrator", "SUPERADMIN"):
        check = _check(role=role, resource_type="anything", action=Action.DELETE)
        assert permission_service.check_permission(db_session, check) is True


def test_admin_bypass_uses_configured_roles(db_session):
    config = Settings(admin_roles=["root"])

    assert permission_service.check_permission(
        db_session, _check(role="root", action="delete"), config
    )
    assert not permission_service.check_permission(
        db_session, _check(role="admin", action="delete"), config
    )


def test_groupless_analytics_read_bypass(db_session):
    check = _check(group_id=0, resource_type="qr_analytics")
    assert permission_service.check_permission(db_session, check) is True

    check = _check(group_id=None, resource_type="analytics")
    assert permission_service.check_permission(db_session, check) is True


def test_groupless_bypass_is_read_only(db_session):
    check = _check(group_id=0, resource_type="qr_analytics", action=Action.EXPORT)
    assert permission_service.check_permission(db_session, check) is False


def test_grouped_analytics_read_needs_a_rule(db_session):
    check = _check(group_id=7, resource_type="qr_analytics", owner_group_id=7)
    assert permission_service.check_permission(db_session, check) is False

    permission_store.create_rule(db_session, "user", "qr_analytics", "read", "group")
    assert permission_service.check_permission(db_session, check) is True


def test_missing_rule_denies(db_session):
    check = _check(owner_id="u-1")
    assert permission_service.check_permission(db_session, check) is False


def test_own_scope(db_session, seeded):
    update = Action.UPDATE
    assert permission_service.check_permission(
        db_session, _check(action=update, owner_id="u-1")
    )
    assert not permission_service.check_permission(
        db_session, _check(action=update, owner_id="u-2")
    )
    # unknown owner fails closed
    assert not permission_service.check_permission(db_session, _check(action=update))


def test_group_scope(db_session, seeded):
    assert permission_service.check_permission(
        db_session, _check(owner_id="u-2", owner_group_id=7)
    )
    assert not permission_service.check_permission(
        db_session, _check(owner_id="u-2", owner_group_id=8)
    )
    # no group information: only the owner passes
    assert permission_service.check_permission(db_session, _check(owner_id="u-1"))
    assert not permission_service.check_permission(db_session, _check(owner_id="u-2"))


def test_empty_strings_are_unknown(db_session, seeded):
    check = _check(action=Action.UPDATE, owner_id="", owner_group_id="")
    assert permission_service.check_permission(db_session, check) is False

    check = _check(owner_id="u-1", owner_group_id="")
    assert permission_service.check_permission(db_session, check) is True


def test_numeric_string_group_is_coerced(db_session, seeded):
    check = _check(owner_id="u-2", owner_group_id="7")
    assert permission_service.check_permission(db_session, check) is True


def test_role_is_canonicalized_case_insensitively(db_session):
    db_session.add(Role(name="Editor", display_name="Editor"))
    db_session.commit()
    permission_store.create_rule(db_session, "Editor", "short_url", "read", "all")

    check = _check(role="editor", resource_type="short_url")
    assert permission_service.check_permission(db_session, check) is True


def test_unknown_role_is_used_verbatim(db_session):
    permission_store.create_rule(db_session, "auditor", "short_url", "read", "all")

    check = _check(role="auditor", resource_type="short_url")
    assert permission_service.check_permission(db_session, check) is True


def test_resource_aliases_resolve_to_canonical_name(db_session, seeded):
    check = _check(resource_type="QR_Codes", owner_id="u-1")
    assert permission_service.check_permission(db_session, check) is True


def test_raw_resource_name_is_tried_after_alias(db_session):
    # Rows written before resource names were canonicalized on save
    db_session.add(
        PermissionRule(role="user", resource_type="urls", action="read", scope="all")
    )
    db_session.commit()

    check = _check(resource_type="urls")
    assert permission_service.check_permission(db_session, check) is True


def test_string_action_is_normalized(db_session, seeded):
    check = _check(action=" Update ", owner_id="u-1")
    assert permission_service.check_permission(db_session, check) is True


def test_unknown_action_raises(db_session):
    with pytest.raises(ValueError):
        permission_service.check_permission(db_session, _check(action="publish"))


def test_rule_scope_changes_take_effect(db_session):
    permission_store.upsert_rule(db_session, "user", "qr_code", "delete", Scope.OWN)
    check = _check(action=Action.DELETE, owner_id="u-2", owner_group_id=7)
    assert permission_service.check_permission(db_session, check) is False

    permission_store.upsert_rule(db_session, "user", "qr_code", "delete", Scope.GROUP)
    assert permission_service.check_permission(db_session, check) is True


def test_store_outage_raises_instead_of_denying(db_session, monkeypatch):
    def unavailable(*args, **kwargs):
        raise OperationalError("SELECT 1", {}, Exception("connection refused"))

    monkeypatch.setattr(db_session, "query", unavailable)

    with pytest.raises(StoreUnavailableError):
        permission_service.check_permission(db_session, _check(owner_id="u-1"))


def test_for_identity_copies_caller_fields(db_session, seeded):
    identity = SessionIdentity(user_id="u-1", role="user", group_id=7)
    check = PermissionCheck.for_identity(identity, "qr_code", "read", owner_id="u-1")

    assert check.group_id == 7
    assert permission_service.check_permission(db_session, check) is True


def test_has_admin_role(db_session):
    assert permission_service.has_admin_role(db_session, "Admin")
    assert not permission_service.has_admin_role(db_session, "user")
