"""Success/failure values returned by ``RuntimeSession.interpret``."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union


@dataclass(frozen=True)
class Success:
    value: Any = None

    @property
    def ok(self) -> bool:
        return True

    def unwrap(self) -> Any:
        return self.value


@dataclass(frozen=True)
class Failure:
    error: BaseException

    @property
    def ok(self) -> bool:
        return False

    @property
    def message(self) -> str:
        return str(self.error)

    def unwrap(self) -> Any:
        raise self.error


Result = Union[Success, Failure]

__all__ = ["Success", "Failure", "Result"]
