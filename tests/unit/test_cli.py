import json
from pathlib import Path

import pytest

from grantsync import cli

GRANTS_YAML = (
    "grants:\n"
    "  - user: app@%\n"
    "    table: app_db.*\n"
    "    privileges: [SELECT, INSERT]\n"
)


@pytest.fixture
def grants_file(tmp_path: Path) -> Path:
    path = tmp_path / "grants.yaml"
    path.write_text(GRANTS_YAML, encoding="utf-8")
    return path


@pytest.fixture
def patched_executor(monkeypatch, stub_executor_factory):
    class _ContextExecutor(stub_executor_factory):
        instances: list = []

        def __init__(self, _settings) -> None:  # type: ignore[no-untyped-def]
            super().__init__({"app@%": "GRANT SELECT ON `app_db`.* TO `app`@`%`"})
            self.closed = False
            _ContextExecutor.instances.append(self)

        def __enter__(self):  # type: ignore[no-untyped-def]
            return self

        def __exit__(self, *_exc_info) -> None:  # type: ignore[no-untyped-def]
            self.closed = True

    _ContextExecutor.instances = []
    monkeypatch.setattr(cli, "MySQLGrantConnection", _ContextExecutor)
    return _ContextExecutor


@pytest.mark.unit
def test_plan_prints_statements_without_executing(grants_file, patched_executor, capsys) -> None:
    exit_code = cli.main(["plan", "--grants", str(grants_file)])

    output = capsys.readouterr().out
    assert exit_code == cli.EXIT_OK
    assert "[planned] app@%/app_db.*" in output
    assert "GRANT INSERT ON `app_db`.* TO 'app'@'%';" in output
    executor = patched_executor.instances[0]
    assert executor.statements == []
    assert executor.closed


@pytest.mark.unit
def test_apply_json_output(grants_file, patched_executor, capsys) -> None:
    exit_code = cli.main(["apply", "--grants", str(grants_file), "--format", "json"])

    payload = json.loads(capsys.readouterr().out)
    assert exit_code == cli.EXIT_OK
    assert payload["ok"] is True
    assert payload["flushed"] is True
    assert payload["outcomes"][0]["status"] == "applied"
    assert payload["outcomes"][0]["statements"] == ["GRANT INSERT ON `app_db`.* TO 'app'@'%'"]


@pytest.mark.unit
def test_missing_grants_file_is_usage_error(tmp_path, patched_executor, capsys) -> None:
    exit_code = cli.main(["plan", "--grants", str(tmp_path / "missing.yaml")])

    assert exit_code == cli.EXIT_USAGE
    assert "授权声明文件不存在" in capsys.readouterr().err
    assert patched_executor.instances == []
