import pytest

from grantsync.core.types.grants import GrantIdentity
from grantsync.services.grants.statement_builder import (
    build_grant,
    build_revoke,
    quote_principal,
    quote_scope,
    render_privileges,
)


@pytest.mark.unit
@pytest.mark.parametrize(
    ("scope", "expected"),
    [
        ("*.*", "*.*"),
        ("app_db.*", "`app_db`.*"),
        ("app_db.users", "`app_db`.users"),
        ("PROCEDURE app_db.cleanup", "PROCEDURE `app_db`.cleanup"),
        ("FUNCTION app_db.total", "FUNCTION `app_db`.total"),
    ],
)
def test_quote_scope(scope: str, expected: str) -> None:
    assert quote_scope(scope) == expected


@pytest.mark.unit
def test_quote_principal_escapes_quotes() -> None:
    assert quote_principal("app@10.0.%") == "'app'@'10.0.%'"
    assert quote_principal("o'brien@%") == "'o''brien'@'%'"


@pytest.mark.unit
def test_render_privileges_uses_long_form_for_all() -> None:
    assert render_privileges(("ALL",)) == "ALL PRIVILEGES"
    assert render_privileges(("INSERT", "SELECT (a, b)")) == "INSERT, SELECT (a, b)"


@pytest.mark.unit
def test_build_grant_with_grant_option() -> None:
    identity = GrantIdentity(user="app", host="%", scope="app_db.*")

    action = build_grant(identity, ("INSERT", "SELECT"), ("GRANT",))

    assert action.kind == "grant"
    assert action.sql == "GRANT INSERT, SELECT ON `app_db`.* TO 'app'@'%' WITH GRANT OPTION"


@pytest.mark.unit
def test_build_grant_for_proxy_targets_principal() -> None:
    identity = GrantIdentity(user="app", host="%", scope="backend@localhost")

    action = build_grant(identity, ("PROXY",))

    assert action.sql == "GRANT PROXY ON 'backend'@'localhost' TO 'app'@'%'"


@pytest.mark.unit
def test_revoke_all_sends_grant_option_revoke_first() -> None:
    identity = GrantIdentity(user="app", host="%", scope="app_db.*")

    actions = build_revoke(identity)

    assert [action.kind for action in actions] == ["revoke_grant_option", "revoke"]
    assert [action.sql for action in actions] == [
        "REVOKE GRANT OPTION ON `app_db`.* FROM 'app'@'%'",
        "REVOKE ALL PRIVILEGES ON `app_db`.* FROM 'app'@'%'",
    ]


@pytest.mark.unit
def test_revoke_specific_privileges_is_single_statement() -> None:
    identity = GrantIdentity(user="app", host="%", scope="app_db.*")

    actions = build_revoke(identity, ("DELETE",))

    assert [action.sql for action in actions] == ["REVOKE DELETE ON `app_db`.* FROM 'app'@'%'"]


@pytest.mark.unit
def test_revoke_proxy_skips_grant_option_statement() -> None:
    identity = GrantIdentity(user="app", host="%", scope="backend@localhost")

    actions = build_revoke(identity, ("PROXY",))

    assert [action.sql for action in actions] == ["REVOKE PROXY ON 'backend'@'localhost' FROM 'app'@'%'"]
