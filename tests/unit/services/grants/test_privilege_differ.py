import pytest

from grantsync.core.types.grants import DiffResult
from grantsync.services.grants.privilege_differ import diff_privileges, options_changed


@pytest.mark.unit
def test_previous_all_revokes_everything_and_grants_desired() -> None:
    assert diff_privileges(("ALL",), ("SELECT",)) == DiffResult(revoke=("ALL",), grant=("SELECT",))


@pytest.mark.unit
def test_desired_all_grants_without_revoking() -> None:
    assert diff_privileges(("SELECT",), ("ALL",)) == DiffResult(revoke=(), grant=("ALL",))


@pytest.mark.unit
def test_plain_sets_use_set_difference() -> None:
    diff = diff_privileges(("SELECT", "INSERT"), ("INSERT", "UPDATE"))

    assert diff == DiffResult(revoke=("SELECT",), grant=("UPDATE",))
    assert not set(diff.revoke) & set(diff.grant)


@pytest.mark.unit
def test_column_privileges_are_distinct_tokens() -> None:
    diff = diff_privileges(("SELECT (a, b)",), ("SELECT (a, b, c)",))

    assert diff == DiffResult(revoke=("SELECT (a, b)",), grant=("SELECT (a, b, c)",))


@pytest.mark.unit
def test_identical_sets_produce_empty_diff() -> None:
    diff = diff_privileges(("INSERT", "SELECT"), ("SELECT", "INSERT"))

    assert diff.is_empty


@pytest.mark.unit
def test_applying_diff_reaches_desired_set() -> None:
    previous = ("DELETE", "INSERT", "SELECT")
    desired = ("INSERT", "SELECT", "UPDATE")

    diff = diff_privileges(previous, desired)

    assert (set(previous) - set(diff.revoke)) | set(diff.grant) == set(desired)


@pytest.mark.unit
def test_options_changed() -> None:
    assert options_changed(("NONE",), ("GRANT",))
    assert options_changed(("GRANT",), ("NONE",))
    assert not options_changed(("GRANT", "NONE"), ("GRANT",))
    assert not options_changed(("NONE",), ("NONE",))
