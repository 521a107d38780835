"""prompt_toolkit completer for polyshell."""

from __future__ import annotations

import shlex
from typing import Iterable, List

from prompt_toolkit.completion import Completer, Completion, PathCompleter
from prompt_toolkit.document import Document

from .runtime import RuntimeSession

PATH_COMMANDS = {"fcat", "fls", "fcd"}
MODULE_COMMANDS = {"use"}


def _normalise_tokens(text: str) -> List[str]:
    if not text:
        return []
    try:
        tokens = shlex.split(text, posix=True)
        trailing = text[-1].isspace()
    except ValueError:
        tokens = text.strip().split()
        trailing = text.endswith((" ", "\t"))
    if trailing:
        tokens.append("")
    return tokens


class ShellCompleter(Completer):
    """Completes command names, module names and file paths."""

    def __init__(self, runtime: RuntimeSession) -> None:
        self.runtime = runtime
        self._path = PathCompleter(expanduser=True)

    def get_completions(self, document: Document, complete_event) -> Iterable[Completion]:
        tokens = _normalise_tokens(document.text_before_cursor)
        if not tokens:
            yield from self._complete(self._command_names(), "")
            return
        prefix = tokens[-1]
        if len(tokens) == 1:
            yield from self._complete(self._command_names(), prefix)
            return
        command = tokens[0]
        if command in MODULE_COMMANDS and len(tokens) == 2:
            yield from self._complete([module.name for module in self.runtime.module_manager.modules], prefix)
            return
        if command in PATH_COMMANDS or prefix.startswith((".", "/", "~")):
            yield from self._path.get_completions(Document(prefix, cursor_position=len(prefix)), complete_event)

    def _command_names(self) -> List[str]:
        return sorted(self.runtime.module_manager.command_set)

    @staticmethod
    def _complete(candidates: Iterable[str], prefix: str) -> Iterable[Completion]:
        needle = prefix.lower()
        for entry in sorted(dict.fromkeys(candidates)):
            if entry.lower().startswith(needle):
                yield Completion(entry, start_position=-len(prefix))
