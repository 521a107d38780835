"""Error kinds raised inside the polyshell runtime."""

from __future__ import annotations

from typing import Optional


class ShellError(Exception):
    """Base class for every failure the runtime reports as a value."""


class ConfigError(ShellError):
    pass


class MalformedSourceURL(ShellError):
    def __init__(self, url: str) -> None:
        super().__init__(f"Malformed source URL: {url!r} (expected <prefix>:<path>)")
        self.url = url


class SourceNotFound(ShellError):
    def __init__(self, url: str) -> None:
        super().__init__(f"No module can open source {url!r}")
        self.url = url


class CommandNotFound(ShellError):
    def __init__(self, name: Optional[str]) -> None:
        if name:
            message = f"command '{name}' not found"
        else:
            message = "no command given"
        super().__init__(message)
        self.name = name


class CommandSyntaxError(ShellError):
    pass


class InvalidArguments(ShellError):
    def __init__(self, command: str, reason: str) -> None:
        super().__init__(f"{command}: {reason}")
        self.command = command
        self.reason = reason


class QuerySyntaxError(ShellError):
    pass


class PassthroughFailure(ShellError):
    def __init__(self, command: str, reason: str, returncode: Optional[int] = None) -> None:
        detail = f"`{command}` failed"
        if returncode is not None:
            detail += f" (exit {returncode})"
        super().__init__(f"{detail}: {reason}" if reason else detail)
        self.command = command
        self.reason = reason
        self.returncode = returncode


class DecodeFailure(ShellError):
    def __init__(self, topic: str, reason: str) -> None:
        super().__init__(f"unable to decode message for {topic!r}: {reason}")
        self.topic = topic
        self.reason = reason


class ModuleTeardownFailure(ShellError):
    def __init__(self, module: str, reason: str) -> None:
        super().__init__(f"module '{module}' failed to shut down: {reason}")
        self.module = module
        self.reason = reason


__all__ = [
    "ShellError",
    "ConfigError",
    "MalformedSourceURL",
    "SourceNotFound",
    "CommandNotFound",
    "CommandSyntaxError",
    "InvalidArguments",
    "QuerySyntaxError",
    "PassthroughFailure",
    "DecodeFailure",
    "ModuleTeardownFailure",
]
