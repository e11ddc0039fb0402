"""Tests for the scan.py command line entry point."""

from __future__ import annotations

import json

import pytest

import scan
from sitecheck.models.types import CheckResult, RunResult, UrlPageCheck


@pytest.fixture
def fake_run(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("SITECHECK_BASE_URL", raising=False)
    calls = []
    outcome = RunResult(url="https://falaya.com")

    async def fake_run_checks(config, checks, use_cache, quiet=False):
        calls.append({"config": config, "checks": checks, "use_cache": use_cache, "quiet": quiet})
        outcome.checks = checks
        return outcome

    monkeypatch.setattr(scan, "run_checks", fake_run_checks)
    return calls, outcome


def _main(monkeypatch, *argv):
    monkeypatch.setattr("sys.argv", ["scan.py", *argv])
    with pytest.raises(SystemExit) as exc_info:
        scan.main()
    return exc_info.value.code


def test_clean_run_exits_zero(monkeypatch, fake_run, capsys):
    calls, _ = fake_run
    code = _main(monkeypatch, "falaya.com", "--checks", "urls,mobile", "--use-cache", "--headful")

    assert code == 0
    config = calls[0]["config"]
    assert config.base_url == "https://falaya.com"
    assert not config.headless
    assert calls[0]["checks"] == ["urls", "mobile"]
    assert calls[0]["use_cache"] is True
    assert "Discovery: cached if available" in capsys.readouterr().out


def test_failures_exit_one(monkeypatch, fake_run):
    _, outcome = fake_run
    outcome.pages_checked.append(UrlPageCheck(
        url="https://falaya.com/x", status=404, final_url="https://falaya.com/x",
        result=CheckResult.FAIL, reason="HTTP status 404 is outside 200-399",
    ))
    assert _main(monkeypatch) == 1


def test_json_output(monkeypatch, fake_run, capsys, tmp_path):
    calls, _ = fake_run
    code = _main(monkeypatch, "--json", "--checks", "visual", "--reports-dir", str(tmp_path / "out"))

    assert code == 0
    assert calls[0]["quiet"] is True
    assert calls[0]["config"].reports_dir == tmp_path / "out"
    data = json.loads(capsys.readouterr().out)
    assert data["checks"] == ["visual"]
    assert data["failures"] == 0


def test_unknown_check_is_a_usage_error(monkeypatch, fake_run):
    calls, _ = fake_run
    assert _main(monkeypatch, "--checks", "urls,speed") == 2
    assert calls == []
