"""Module and command base classes."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, List, Optional

from ..parser import CommandParams, UnixArgs
from ..sources import InputSource, OutputSource

if TYPE_CHECKING:  # pragma: no cover
    from ..runtime import RuntimeSession


@dataclass(frozen=True)
class Command:
    """A named command owned by exactly one module."""

    name: str
    fx: Callable[[UnixArgs], Any] = field(compare=False)
    module: "Module" = field(compare=False, repr=False)
    params: CommandParams = field(default_factory=CommandParams)
    help: str = ""
    prompt_aware: bool = False

    def format_help(self) -> str:
        return f"{self.name:<12} {self.help}"

    def usage(self) -> str:
        return self.params.usage(self.name)


class Module:
    """A pluggable backend adapter.

    Subclasses set ``name`` and ``prefix`` and return their commands from
    ``get_commands``. Input and output sources are optional.
    """

    name = "module"
    prefix = "module"

    def __init__(self) -> None:
        self._runtime: Optional["RuntimeSession"] = None

    def bind(self, runtime: "RuntimeSession") -> None:
        self._runtime = runtime

    @property
    def runtime(self) -> "RuntimeSession":
        if self._runtime is None:
            raise RuntimeError(f"module '{self.name}' is not bound to a session")
        return self._runtime

    def get_commands(self) -> List[Command]:
        return []

    def get_input_source(self, url: str) -> Optional[InputSource]:
        return None

    def get_output_source(self, url: str) -> Optional[OutputSource]:
        return None

    def prompt(self) -> str:
        return f"{self.name}:/"

    def shutdown(self) -> None:
        pass

    def command(
        self,
        name: str,
        fx: Callable[[UnixArgs], Any],
        *,
        params: Optional[CommandParams] = None,
        help: str = "",
        prompt_aware: bool = False,
    ) -> Command:
        """Build a command owned by this module."""
        return Command(
            name=name,
            fx=fx,
            module=self,
            params=params or CommandParams(),
            help=help,
            prompt_aware=prompt_aware,
        )

    def __repr__(self) -> str:
        return f"<{type(self).__name__} name={self.name} prefix={self.prefix}>"
