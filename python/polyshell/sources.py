"""Input and output source contracts plus URL helpers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Optional, Tuple

from .errors import MalformedSourceURL


@dataclass(frozen=True)
class SourceRecord:
    key: Optional[bytes]
    message: bytes


class InputSource:
    """Reads records from a module-owned location."""

    def read(self) -> Optional[SourceRecord]:
        raise NotImplementedError("InputSource must implement read()")

    def close(self) -> None:
        pass

    def __iter__(self) -> Iterator[SourceRecord]:
        while True:
            record = self.read()
            if record is None:
                return
            yield record

    def __enter__(self) -> "InputSource":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


class OutputSource:
    """Writes records to a module-owned location."""

    def write(self, record: SourceRecord) -> None:
        raise NotImplementedError("OutputSource must implement write()")

    def close(self) -> None:
        pass

    def __enter__(self) -> "OutputSource":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


def parse_source_url(url: str) -> Tuple[str, str]:
    """Split ``prefix:path`` at the first colon."""
    prefix, sep, path = url.partition(":")
    if not sep:
        raise MalformedSourceURL(url)
    return prefix, path


def with_default_prefix(prefix: str, device_url: str) -> str:
    """Scope a bare device path to *prefix* unless it already has one."""
    if ":" in device_url:
        return device_url
    return f"{prefix}:{device_url}"


__all__ = ["SourceRecord", "InputSource", "OutputSource", "parse_source_url", "with_default_prefix"]
