"""
Pytest configuration and fixtures for polyshell tests.
"""
from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, Callable, List, Optional

import pytest

REPO_ROOT = Path(__file__).resolve().parents[2]
PYTHON_SRC = REPO_ROOT / "python"
if str(PYTHON_SRC) not in sys.path:
    sys.path.insert(0, str(PYTHON_SRC))

from polyshell.config import ShellConfig  # noqa: E402
from polyshell.modules.base import Module  # noqa: E402
from polyshell.parser import CommandParams, UnixArgs  # noqa: E402
from polyshell.runtime import RuntimeSession  # noqa: E402


class StubModule(Module):
    """Module double recording command calls and teardown."""

    def __init__(self, name: str, prefix: Optional[str] = None, *, teardown_error: Optional[Exception] = None) -> None:
        super().__init__()
        self.name = name
        self.prefix = prefix or name
        self.teardown_error = teardown_error
        self.shutdown_calls = 0
        self.calls: List[UnixArgs] = []
        self.input_urls: List[str] = []
        self.output_urls: List[str] = []
        self.input_source: Any = None
        self.output_source: Any = None
        self._commands = []

    def add(
        self,
        name: str,
        fx: Optional[Callable[[UnixArgs], Any]] = None,
        *,
        params: Optional[CommandParams] = None,
        prompt_aware: bool = False,
    ) -> "StubModule":
        def record(args: UnixArgs) -> Any:
            self.calls.append(args)
            return fx(args) if fx else f"{self.name}:{name}"

        self._commands.append(self.command(name, record, params=params, prompt_aware=prompt_aware))
        return self

    def get_commands(self):
        return list(self._commands)

    def get_input_source(self, url: str):
        self.input_urls.append(url)
        return self.input_source

    def get_output_source(self, url: str):
        self.output_urls.append(url)
        return self.output_source

    def shutdown(self) -> None:
        self.shutdown_calls += 1
        if self.teardown_error is not None:
            raise self.teardown_error


@pytest.fixture
def make_module() -> Callable[..., StubModule]:
    return StubModule


@pytest.fixture
def config(tmp_path) -> ShellConfig:
    return ShellConfig(file_root=tmp_path, history_file=None)


@pytest.fixture
def runtime(config) -> RuntimeSession:
    session = RuntimeSession(config)
    yield session
    session.shutdown()
