"""Command line tokenizing and Unix-style argument parsing."""

from __future__ import annotations

import re
import shlex
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from .errors import CommandSyntaxError, InvalidArguments

_NUMBER = re.compile(r"^-?\d+(\.\d+)?$")


def parse_tokens(line: str) -> List[str]:
    """Split a command line into tokens using shlex rules."""
    if not line or not line.strip():
        return []
    try:
        return shlex.split(line, comments=False, posix=True)
    except ValueError as exc:
        raise CommandSyntaxError(f"parse error: {exc}") from exc


def _is_flag(token: str) -> bool:
    return len(token) > 1 and token.startswith("-") and not _NUMBER.match(token)


@dataclass
class UnixArgs:
    """Command name plus positional arguments and flags."""

    command_name: Optional[str] = None
    args: List[str] = field(default_factory=list)
    flags: Dict[str, Optional[str]] = field(default_factory=dict)

    def has_flag(self, name: str) -> bool:
        return name in self.flags

    def flag(self, name: str, default: Optional[str] = None) -> Optional[str]:
        value = self.flags.get(name)
        return default if value is None else value

    def int_flag(self, name: str, default: Optional[int] = None) -> Optional[int]:
        value = self.flags.get(name)
        if value is None:
            return default
        try:
            return int(value)
        except ValueError as exc:
            raise InvalidArguments(self.command_name or "?", f"{name} expects an integer, got {value!r}") from exc


def parse_unix_args(tokens: Sequence[str]) -> UnixArgs:
    """Convert tokens into a command name, positional arguments and flags.

    A flag takes the following token as its value unless that token is itself
    a flag or missing, in which case the flag value is ``None``.
    """
    if not tokens:
        return UnixArgs()
    command_name, *rest = tokens
    result = UnixArgs(command_name=command_name)
    pending: Optional[str] = None
    for token in rest:
        if _is_flag(token):
            if pending is not None:
                result.flags[pending] = None
            pending = token
        elif pending is not None:
            result.flags[pending] = token
            pending = None
        else:
            result.args.append(token)
    if pending is not None:
        result.flags[pending] = None
    return result


@dataclass(frozen=True)
class CommandParams:
    """Parameter specification of a command.

    ``positional`` lists ``(name, required)`` pairs in order; ``flags`` lists
    ``(flag, label)`` pairs. Required positionals must precede optional ones.
    """

    positional: Tuple[Tuple[str, bool], ...] = ()
    flags: Tuple[Tuple[str, str], ...] = ()
    required_flags: Tuple[str, ...] = ()

    @property
    def min_args(self) -> int:
        return sum(1 for _, required in self.positional if required)

    @property
    def max_args(self) -> int:
        return len(self.positional)

    def check_args(self, command_name: str, unix_args: UnixArgs) -> None:
        count = len(unix_args.args)
        if count < self.min_args:
            missing = [name for name, required in self.positional if required][count:]
            raise InvalidArguments(
                command_name,
                f"missing argument(s) {', '.join(missing)}; usage: {self.usage(command_name)}",
            )
        if count > self.max_args:
            raise InvalidArguments(
                command_name,
                f"expected at most {self.max_args} argument(s), got {count}; usage: {self.usage(command_name)}",
            )
        known = {flag for flag, _ in self.flags}
        for flag in unix_args.flags:
            if flag not in known:
                raise InvalidArguments(command_name, f"unknown flag {flag}; usage: {self.usage(command_name)}")
        for flag in self.required_flags:
            if unix_args.flags.get(flag) is None:
                raise InvalidArguments(command_name, f"flag {flag} is required")

    def usage(self, command_name: str) -> str:
        parts = [command_name]
        for name, required in self.positional:
            parts.append(name if required else f"[{name}]")
        for flag, label in self.flags:
            if flag in self.required_flags:
                parts.append(f"{flag} {label}")
            else:
                parts.append(f"[{flag} {label}]")
        return " ".join(parts)


def params(*positional: str, flags: Sequence[Tuple[str, str]] = (), required_flags: Sequence[str] = ()) -> CommandParams:
    """Build ``CommandParams`` from names; ``[name]`` marks an optional one."""
    specs = []
    for name in positional:
        if name.startswith("[") and name.endswith("]"):
            specs.append((name[1:-1], False))
        else:
            specs.append((name, True))
    return CommandParams(positional=tuple(specs), flags=tuple(flags), required_flags=tuple(required_flags))


__all__ = ["parse_tokens", "parse_unix_args", "UnixArgs", "CommandParams", "params"]
