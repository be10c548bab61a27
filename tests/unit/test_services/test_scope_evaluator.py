# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Tests for scope evaluation and ownership normalization."""

import pytest

from src.models.enums import Scope
from src.rbac.context import Ownership, SessionIdentity
from src.services.scope_evaluator import evaluate_scope, normalize_ownership

CALLER = SessionIdentity(user_id="u-1", role="user", group_id=7)


@pytest.mark.parametrize(
    "owner_id, owner_group_id, expected",
    [
        (None, None, Ownership()),
        ("", "", Ownership()),
        ("   ", "  ", Ownership()),
        ("u-1", "7", Ownership("u-1", 7)),
        (" u-1 ", 7, Ownership("u-1", 7)),
        ("u-1", 0, Ownership("u-1", None)),
        ("u-1", "abc", Ownership("u-1", None)),
        ("u-1", True, Ownership("u-1", None)),
    ],
)
def test_normalize_ownership(owner_id, owner_group_id, expected):
    assert normalize_ownership(owner_id, owner_group_id) == expected


@pytest.mark.parametrize(
    "ownership",
    [Ownership(), Ownership("u-1", 7), Ownership("u-2", 8)],
)
def test_none_denies_and_all_allows(ownership):
    assert evaluate_scope(Scope.NONE, CALLER, ownership) is False
    assert evaluate_scope(Scope.ALL, CALLER, ownership) is True


def test_own_requires_known_matching_owner():
    assert evaluate_scope(Scope.OWN, CALLER, Ownership("u-1")) is True
    assert evaluate_scope(Scope.OWN, CALLER, Ownership("u-2")) is False
    assert evaluate_scope(Scope.OWN, CALLER, Ownership()) is False


def test_own_ignores_group_membership():
    assert evaluate_scope(Scope.OWN, CALLER, Ownership("u-2", 7)) is False


def test_group_matches_known_group():
    assert evaluate_scope(Scope.GROUP, CALLER, Ownership("u-2", 7)) is True
    assert evaluate_scope(Scope.GROUP, CALLER, Ownership("u-1", 8)) is False


def test_group_falls_back_to_ownership_without_group():
    assert evaluate_scope(Scope.GROUP, CALLER, Ownership("u-1")) is True
    assert evaluate_scope(Scope.GROUP, CALLER, Ownership("u-2")) is False
    assert evaluate_scope(Scope.GROUP, CALLER, Ownership()) is False


def test_groupless_callers_do_not_share_a_group():
    solo = SessionIdentity(user_id="u-3", role="user", group_id=0)
    ownership = normalize_ownership("u-4", 0)

    assert evaluate_scope(Scope.GROUP, solo, ownership) is False


def test_string_scopes_are_accepted():
    assert evaluate_scope("all", CALLER, Ownership()) is True
    assert evaluate_scope("own", CALLER, Ownership("u-1")) is True


def test_unknown_scope_denies():
    assert evaluate_scope("everything", CALLER, Ownership("u-1", 7)) is False


def test_scope_ordering():
    assert Scope.NONE < Scope.OWN < Scope.GROUP < Scope.ALL
    assert max([Scope.OWN, Scope.ALL, Scope.GROUP]) is Scope.ALL
