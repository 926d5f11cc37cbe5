from __future__ import annotations

import json
from pathlib import Path

import pytest

import backlog_order.cli as cli
from backlog_order.tracker.client import AzureBoardsClient
from tests.helpers.fake_tracker import ORG_URL, FakeSession, tracker_routes


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("AZURE_DEVOPS_ORG_URL", "AZURE_DEVOPS_EXT_PAT", "AZURE_DEVOPS_PAT"):
        monkeypatch.delenv(name, raising=False)


def _patch_tracker(monkeypatch: pytest.MonkeyPatch, session: FakeSession) -> None:
    original_init = AzureBoardsClient.__init__

    def _init(self, config, **kwargs):  # type: ignore[no-untyped-def]
        original_init(self, config, session=session)

    monkeypatch.setattr(AzureBoardsClient, "__init__", _init)


def test_cli_warns_and_exits_one_when_parameters_are_missing(
    clean_env: None, capsys: pytest.CaptureFixture[str]
) -> None:
    exit_code = cli.main(["--project", "Fabrikam"])

    out = capsys.readouterr().out
    assert exit_code == 1
    assert "WARN: missing required parameter(s): org_url,team,token" in out


def test_cli_prints_violations_and_export_path(
    clean_env: None,
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: Path,
    capsys: pytest.CaptureFixture[str],
) -> None:
    monkeypatch.setenv("AZURE_DEVOPS_ORG_URL", ORG_URL)
    monkeypatch.setenv("AZURE_DEVOPS_PAT", "pat-from-env")
    _patch_tracker(monkeypatch, FakeSession(tracker_routes([1, 2], {1: [2]})))
    output = tmp_path / "backlog.csv"

    exit_code = cli.main(
        ["--project", "Fabrikam", "--team", "Core", "--output", str(output), "--json"]
    )

    out = capsys.readouterr().out
    assert exit_code == 0
    assert "pat-from-env" not in out
    assert "WARN: 2 of 2 backlog item(s)" in out
    assert f"CSV export: {output}" in out
    assert output.exists()
    summary = json.loads(out.strip().splitlines()[-1])
    assert summary["flagged_ids"] == [1, 2]
    assert summary["passed"] is False


def test_cli_fail_on_violations_sets_exit_code(
    clean_env: None,
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: Path,
) -> None:
    _patch_tracker(monkeypatch, FakeSession(tracker_routes([1, 2], {1: [2]})))

    exit_code = cli.main(
        [
            "--org-url",
            ORG_URL,
            "--project",
            "Fabrikam",
            "--team",
            "Core",
            "--token",
            "t0ken",
            "--output",
            str(tmp_path / "backlog.csv"),
            "--fail-on-violations",
        ]
    )
    assert exit_code == 1


def test_cli_reports_pass_for_ordered_backlog(
    clean_env: None,
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: Path,
    capsys: pytest.CaptureFixture[str],
) -> None:
    _patch_tracker(monkeypatch, FakeSession(tracker_routes([1, 2], {2: [1]})))

    exit_code = cli.main(
        [
            "--org-url",
            ORG_URL,
            "--project",
            "Fabrikam",
            "--team",
            "Core",
            "--token",
            "t0ken",
            "--output",
            str(tmp_path / "backlog.csv"),
            "--fail-on-violations",
        ]
    )

    out = capsys.readouterr().out
    assert exit_code == 0
    assert "PASS: 2 backlog item(s) in dependency order" in out
    assert "WARN:" not in out


def test_cli_prints_fail_on_tracker_http_error(
    clean_env: None,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    _patch_tracker(monkeypatch, FakeSession({}))

    exit_code = cli.main(
        ["--org-url", ORG_URL, "--project", "P", "--team", "T", "--token", "t"]
    )

    assert exit_code == 1
    assert "FAIL: reason_code=http_error" in capsys.readouterr().out


@pytest.mark.parametrize("body", [None, "project: [unclosed\n"])
def test_cli_prints_fail_for_bad_config_file(
    clean_env: None,
    tmp_path: Path,
    capsys: pytest.CaptureFixture[str],
    body: str | None,
) -> None:
    config_path = tmp_path / "backlog.yaml"
    if body is not None:
        config_path.write_text(body, encoding="utf-8")

    exit_code = cli.main(["--config", str(config_path), "--token", "t"])

    out = capsys.readouterr().out
    assert exit_code == 1
    assert "FAIL: reason_code=invalid_config_file" in out
