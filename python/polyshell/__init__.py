"""
polyshell - interactive shell over heterogeneous data backends.

Backends plug in as modules that own a URL prefix (``file:``, ``kafka:``,
...), a set of commands and optional input/output sources.  The runtime
session interprets each input line as a host passthrough (`` `cmd` ``), a
``select`` query, or a module command, and resolves message decoders for
the payloads modules read.  Use ``python -m polyshell`` to start the shell.
"""

from __future__ import annotations

__version__ = "0.1.0"

from .config import ShellConfig, load_config  # noqa: E402
from .result import Failure, Result, Success  # noqa: E402
from .runtime import RuntimeSession, with_default_prefix  # noqa: E402

__all__ = [
    "RuntimeSession",
    "ShellConfig",
    "load_config",
    "Result",
    "Success",
    "Failure",
    "with_default_prefix",
    "__version__",
]
