"""Interactive REPL for polyshell."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

from prompt_toolkit import PromptSession
from prompt_toolkit.history import FileHistory, InMemoryHistory
from prompt_toolkit.patch_stdout import patch_stdout

from .completion import ShellCompleter
from .output import emit
from .runtime import RuntimeSession

LOGGER = logging.getLogger("polyshell.repl")


class ShellREPL:
    """prompt_toolkit loop feeding lines to ``RuntimeSession.interpret``."""

    def __init__(self, runtime: RuntimeSession, *, history_path: Optional[Path] = None) -> None:
        self.runtime = runtime
        self.history_path = history_path

    def _history(self):
        if self.history_path is None:
            return InMemoryHistory()
        try:
            self.history_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            LOGGER.warning("history disabled: %s", exc)
            return InMemoryHistory()
        return FileHistory(str(self.history_path))

    def run(self) -> int:
        session = PromptSession(
            history=self._history(),
            completer=ShellCompleter(self.runtime),
            complete_while_typing=False,
        )
        buffer: List[str] = []
        while True:
            try:
                with patch_stdout():
                    line = session.prompt("... " if buffer else self.runtime.prompt())
            except KeyboardInterrupt:
                buffer.clear()
                continue
            except EOFError:
                print()
                return 0
            if self._handle_multiline(buffer, line):
                continue
            payload = " ".join(buffer) if buffer else line
            buffer.clear()
            self.dispatch(payload)

    def dispatch(self, line: str) -> int:
        if not line.strip():
            return 0
        result = self.runtime.interpret(line)
        return emit(result, json_output=self.runtime.config.json_output)

    @staticmethod
    def _handle_multiline(buffer: List[str], line: str) -> bool:
        stripped = line.rstrip()
        if stripped.endswith("\\"):
            buffer.append(stripped[:-1])
            return True
        if buffer:
            buffer.append(stripped)
        return False
