from pathlib import Path

import pytest

from grantsync.core.exceptions import ValidationError
from grantsync.core.types.grants import GrantIdentity
from grantsync.services.grants.desired_state import build_desired_state, load_desired_grants
from grantsync.services.grants.grant_parser import GrantParser
from grantsync.services.grants.reconcile_service import GrantReconcileService
from grantsync.utils.version_parser import EngineVersion


@pytest.mark.unit
def test_build_desired_state_normalizes_privileges() -> None:
    state = build_desired_state(
        {
            "grants": [
                {
                    "user": "'app'@'%'",
                    "table": "`app_db`.*",
                    "privileges": ["select", "insert", "update (name,id)", "select"],
                    "options": ["grant"],
                },
            ],
        },
    )

    record = state.present()["app@%/app_db.*"]
    assert record.identity == GrantIdentity(user="app", host="%", scope="app_db.*")
    assert record.privileges == ("INSERT", "SELECT", "UPDATE (id, name)")
    assert record.options == ("GRANT",)


@pytest.mark.unit
def test_all_privileges_long_form_is_accepted() -> None:
    state = build_desired_state([{"user": "admin@localhost", "table": "*.*", "privileges": "ALL PRIVILEGES"}])

    assert state.present()["admin@localhost/*.*"].privileges == ("ALL",)
    assert state.present()["admin@localhost/*.*"].options == ("NONE",)


@pytest.mark.unit
@pytest.mark.parametrize(
    ("privileges", "expected"),
    [
        ("SELECT, INSERT", ("INSERT", "SELECT")),
        ("SELECT (a,b), UPDATE (c)", ("SELECT (a, b)", "UPDATE (c)")),
        (["select,insert", "UPDATE (c)"], ("INSERT", "SELECT", "UPDATE (c)")),
    ],
)
def test_comma_separated_privileges_are_split(privileges, expected: tuple[str, ...]) -> None:
    state = build_desired_state([{"user": "app@%", "table": "db.*", "privileges": privileges}])

    assert state.present()["app@%/db.*"].privileges == expected


@pytest.mark.unit
def test_comma_separated_privileges_match_parsed_grants() -> None:
    desired = build_desired_state([{"user": "app@%", "table": "db.*", "privileges": "SELECT, INSERT"}])
    observed = GrantParser(EngineVersion.parse("8.0.32")).parse("GRANT SELECT, INSERT ON `db`.* TO `app`@`%`")

    plan = GrantReconcileService.plan_identity(observed["app@%/db.*"], desired.present()["app@%/db.*"])

    assert plan.change == "none"
    assert plan.actions == ()


@pytest.mark.unit
def test_absent_grants_do_not_require_privileges() -> None:
    state = build_desired_state({"grants": [{"user": "old@%", "table": "app_db.*", "ensure": "absent"}]})

    assert state.present() == {}
    assert state.absent() == {"old@%/app_db.*": GrantIdentity(user="old", host="%", scope="app_db.*")}


@pytest.mark.unit
@pytest.mark.parametrize(
    "grant",
    [
        {"user": "app", "table": "app_db.*", "privileges": ["SELECT"]},
        {"user": "app@%", "table": "app_db.*", "privileges": []},
        {"user": "app@%", "table": "app_db.*", "privileges": ["ALL", "SELECT"]},
        {"user": "app@%", "table": "backend@localhost", "privileges": ["PROXY", "SELECT"]},
        {"user": "app@%", "table": "app_db.*", "privileges": ["SELECT"], "options": ["ADMIN"]},
        {"user": "app@%", "table": "app_db.*", "privileges": ["SELECT"], "name": "app@%/other.*"},
        {"user": "app@%", "table": "app_db.*", "privileges": ["SELECT"], "unknown": True},
    ],
)
def test_invalid_grants_raise_validation_error(grant: dict) -> None:
    with pytest.raises(ValidationError):
        build_desired_state({"grants": [grant]})


@pytest.mark.unit
def test_duplicate_identities_are_rejected() -> None:
    grant = {"user": "app@%", "table": "app_db.*", "privileges": ["SELECT"]}

    with pytest.raises(ValidationError):
        build_desired_state({"grants": [grant, dict(grant, privileges=["INSERT"])]})


@pytest.mark.unit
def test_load_desired_grants_from_yaml(tmp_path: Path) -> None:
    config = tmp_path / "grants.yaml"
    config.write_text(
        "grants:\n"
        "  - user: app@%\n"
        "    table: app_db.*\n"
        "    privileges: [SELECT, INSERT]\n"
        "  - user: old@%\n"
        "    table: app_db.*\n"
        "    ensure: absent\n",
        encoding="utf-8",
    )

    state = load_desired_grants(config)

    assert len(state.grants) == 2
    assert state.present()["app@%/app_db.*"].privileges == ("INSERT", "SELECT")


@pytest.mark.unit
def test_load_desired_grants_missing_file(tmp_path: Path) -> None:
    with pytest.raises(ValidationError) as exc_info:
        load_desired_grants(tmp_path / "missing.yaml")

    assert exc_info.value.message_key == "CONFIG_FILE_NOT_FOUND"


@pytest.mark.unit
def test_load_desired_grants_invalid_yaml(tmp_path: Path) -> None:
    config = tmp_path / "grants.yaml"
    config.write_text("grants: [unclosed\n", encoding="utf-8")

    with pytest.raises(ValidationError) as exc_info:
        load_desired_grants(config)

    assert exc_info.value.message_key == "CONFIG_FILE_INVALID"
