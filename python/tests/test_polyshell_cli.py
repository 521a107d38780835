"""Tests for the polyshell command line entry point."""

from __future__ import annotations

import json

from polyshell.cli import _run_script, main
from polyshell.config import ShellConfig
from polyshell.runtime import RuntimeSession


def _config_file(tmp_path, **settings):
    path = tmp_path / "config.json"
    settings.setdefault("file_root", str(tmp_path))
    path.write_text(json.dumps(settings), encoding="utf-8")
    return str(path)


def test_single_command(tmp_path, capsys):
    rc = main(["--config", _config_file(tmp_path), "-c", "version"])
    assert rc == 0
    assert "polyshell" in capsys.readouterr().out


def test_single_command_failure_json(tmp_path, capsys):
    rc = main(["--config", _config_file(tmp_path), "--json", "-c", "unknown_cmd"])
    assert rc == 1
    payload = json.loads(capsys.readouterr().out)
    assert payload["status"] == "error"
    assert payload["details"]["kind"] == "CommandNotFound"
    assert "unknown_cmd" in payload["error"]


def test_bad_config_exits_with_error(tmp_path, capsys):
    path = tmp_path / "bad.json"
    path.write_text("{", encoding="utf-8")
    assert main(["--config", str(path), "-c", "version"]) == 2
    assert "error:" in capsys.readouterr().out


def test_exit_command_returns_zero(tmp_path):
    assert main(["--config", _config_file(tmp_path), "-c", "exit"]) == 0


def test_script_executes_commands(tmp_path, capsys):
    (tmp_path / "data.txt").write_text("alpha\n", encoding="utf-8")
    script = tmp_path / "script.txt"
    script.write_text("# comment\n\nfcat data.txt\nautoswitch on\n", encoding="utf-8")
    with RuntimeSession(ShellConfig(file_root=tmp_path)) as runtime:
        rc = _run_script(runtime, script)
        assert runtime.config.auto_switching is True
    assert rc == 0
    out = capsys.readouterr().out
    assert "alpha" in out


def test_script_stops_at_first_failure(tmp_path, capsys):
    script = tmp_path / "script.txt"
    script.write_text("unknowncmd\nautoswitch on\n", encoding="utf-8")
    with RuntimeSession(ShellConfig(file_root=tmp_path)) as runtime:
        rc = _run_script(runtime, script)
        assert runtime.config.auto_switching is False
    assert rc != 0


def test_script_missing_file_returns_error(tmp_path):
    with RuntimeSession(ShellConfig(file_root=tmp_path)) as runtime:
        assert _run_script(runtime, tmp_path / "missing.txt") != 0


def test_main_script_flag(tmp_path, capsys):
    script = tmp_path / "script.txt"
    script.write_text("`echo from-host`\n", encoding="utf-8")
    rc = main(["--config", _config_file(tmp_path), "--script", str(script)])
    assert rc == 0
    assert "from-host" in capsys.readouterr().out
