from __future__ import annotations

import pytest

from user_admin.errors import ValidationError
from user_admin.models import (
    CreateUser,
    SetBlocked,
    SetIP,
    SetPassword,
    SetReferral,
    SetRenewal,
    UserAction,
    UserRecord,
    parse_action,
)


def test_create_user_payload_fields_and_insert_statement():
    tag, action = parse_action(
        {"action": "create-user", "username": "Bob", "password": "p", "renewalDate": "2025-01-01"}
    )
    assert tag == "create-user"
    assert isinstance(action, CreateUser)

    sql, params = action.statement()
    assert sql.startswith("INSERT INTO users")
    assert "is_blocked" in sql and "indicacao" in sql
    # The username is stored as given, next to its case-folded lookup key.
    assert params == ("Bob", "bob", "p", "2025-01-01")


@pytest.mark.parametrize(
    "payload, cls",
    [
        ({"action": "set-password", "username": "a", "newPassword": "x"}, SetPassword),
        ({"action": "set-blocked", "username": "a", "isBlocked": True}, SetBlocked),
        ({"action": "set-renewal", "username": "a", "renewalDate": "2026-02-02"}, SetRenewal),
        ({"action": "set-referral", "username": "a", "indicacao": 4}, SetReferral),
        ({"action": "set-ip", "username": "a", "newIp": "10.0.0.1"}, SetIP),
    ],
)
def test_updates_match_username_case_insensitively(payload, cls):
    _, action = parse_action(payload)
    assert isinstance(action, cls)

    sql, params = action.statement()
    assert sql.startswith("UPDATE users SET")
    assert sql.endswith("WHERE username_key = ?")
    assert params[-1] == "a"


def test_legacy_tags_and_snake_case_fields_are_accepted():
    _, action = parse_action({"action": "inserirUsuario", "username": "b", "password": "p", "renewal_date": "d"})
    assert isinstance(action, CreateUser)
    assert action.renewal_date == "d"

    _, action = parse_action({"action": "bloquearUsuario", "username": "b", "is_blocked": True})
    assert isinstance(action, SetBlocked) and action.is_blocked is True

    _, action = parse_action({"action": "atualizarIP", "username": "b", "novo_ip": "1.2.3.4"})
    assert isinstance(action, SetIP) and action.new_ip == "1.2.3.4"

    _, action = parse_action({"action": "atualizarSenha", "username": "b", "new_password": "n"})
    assert isinstance(action, SetPassword) and action.new_password == "n"


def test_missing_or_mistyped_optional_fields_take_zero_values():
    _, action = parse_action({"action": "create-user"})
    assert (action.username, action.password, action.renewal_date) == ("", "", "")

    _, action = parse_action({"action": "set-blocked", "username": 42, "isBlocked": "yes"})
    assert action.username == ""
    assert action.is_blocked is False

    _, action = parse_action({"action": "set-password", "username": "a", "newPassword": 123})
    assert action.new_password == ""

    _, action = parse_action({"action": "set-ip", "username": "a", "newIp": None})
    assert action.new_ip == ""


@pytest.mark.parametrize("value, expected", [(3, 3), (3.0, 3), (0, 0), (-2, -2)])
def test_referral_count_accepts_whole_numbers(value, expected):
    _, action = parse_action({"action": "set-referral", "username": "a", "indicacao": value})
    assert action.indicacao == expected
    assert isinstance(action.indicacao, int)


@pytest.mark.parametrize("value", [3.5, "3", True, None, [], 1e30])
def test_referral_count_rejects_non_integral_values(value):
    with pytest.raises(ValidationError) as ei:
        parse_action({"action": "set-referral", "username": "a", "indicacao": value})
    assert ei.value.message == "Invalid referral count"
    assert ei.value.status_code == 400


def test_referral_count_is_required():
    with pytest.raises(ValidationError, match="Invalid referral count"):
        parse_action({"action": "set-referral", "username": "a"})


@pytest.mark.parametrize("payload", [{"action": "deleteEverything"}, {"username": "a"}, {"action": 7}])
def test_unknown_action_is_rejected(payload):
    with pytest.raises(ValidationError, match="Unknown action"):
        parse_action(payload)


@pytest.mark.parametrize("payload", [None, [], "create-user", 5])
def test_non_object_body_is_rejected(payload):
    with pytest.raises(ValidationError, match="Invalid request"):
        parse_action(payload)


def test_user_record_serializes_without_password():
    rec = UserRecord(id=1, username="alice", is_blocked=True, renewal_date="2025-01-01", ip=None, indicacao=2)
    out = rec.model_dump(by_alias=True)
    assert out == {
        "id": 1,
        "username": "alice",
        "isBlocked": True,
        "renewalDate": "2025-01-01",
        "ip": None,
        "indicacao": 2,
    }
    assert "password" not in out


def test_lookup_key_folds_non_ascii_case():
    _, action = parse_action({"action": "set-ip", "username": "ÉLODIE", "newIp": "1.2.3.4"})
    _, params = action.statement()
    assert params == ("1.2.3.4", "élodie")

    _, created = parse_action({"action": "create-user", "username": "Straße", "password": "p"})
    assert created.statement()[1][:2] == ("Straße", "strasse")


def test_action_base_cannot_be_instantiated():
    with pytest.raises(TypeError):
        UserAction(username="a")
