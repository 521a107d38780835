"""Tests for the polyshell REPL helpers."""

from __future__ import annotations

from polyshell.repl import ShellREPL


def test_dispatch_prints_results(runtime, capsys):
    repl = ShellREPL(runtime)
    assert repl.dispatch("version") == 0
    assert repl.dispatch("   ") == 0
    assert repl.dispatch("nope") == 1
    out = capsys.readouterr().out
    assert "polyshell" in out
    assert "error: command 'nope' not found" in out


def test_multiline_buffering():
    buffer = []
    assert ShellREPL._handle_multiline(buffer, "select * \\") is True
    assert ShellREPL._handle_multiline(buffer, "from file:x.jsonl") is False
    assert " ".join(buffer) == "select *  from file:x.jsonl"


def test_history_falls_back_to_memory(runtime, tmp_path):
    from prompt_toolkit.history import FileHistory, InMemoryHistory

    assert isinstance(ShellREPL(runtime)._history(), InMemoryHistory)
    history = ShellREPL(runtime, history_path=tmp_path / "sub" / "history")._history()
    assert isinstance(history, FileHistory)
    assert (tmp_path / "sub").is_dir()
