"""Completion tests for polyshell."""

from __future__ import annotations

from prompt_toolkit.document import Document

from polyshell.completion import ShellCompleter


def _complete(runtime, text):
    completer = ShellCompleter(runtime)
    return {c.text for c in completer.get_completions(Document(text, cursor_position=len(text)), None)}


def test_command_completion(runtime):
    assert {"fcat", "fcd", "fls", "fpwd"} <= _complete(runtime, "f")
    assert "help" in _complete(runtime, "")


def test_module_completion_for_use(runtime):
    assert _complete(runtime, "use f") == {"file"}


def test_path_completion_for_file_commands(runtime, tmp_path, monkeypatch):
    (tmp_path / "quotes.jsonl").write_text("", encoding="utf-8")
    monkeypatch.chdir(tmp_path)
    assert "otes.jsonl" in _complete(runtime, "fcat qu")
