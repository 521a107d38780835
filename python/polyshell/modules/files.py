"""Built-in ``file`` module: newline-delimited record files on the local disk."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import IO, Any, Callable, Dict, List, Optional, Set

from ..config import ShellConfig
from ..errors import InvalidArguments, SourceNotFound
from ..parser import UnixArgs, params
from ..sources import InputSource, OutputSource, SourceRecord, parse_source_url, with_default_prefix
from .base import Command, Module

LOGGER = logging.getLogger("polyshell.modules.files")


class FileInputSource(InputSource):
    """Yields one record per line; the key is the 1-based line number."""

    def __init__(self, path: Path, on_close: Optional[Callable[[Any], None]] = None) -> None:
        self.path = path
        self._on_close = on_close
        self._handle: Optional[IO[bytes]] = path.open("rb")
        self._line = 0

    def read(self) -> Optional[SourceRecord]:
        if self._handle is None:
            return None
        while True:
            raw = self._handle.readline()
            if not raw:
                return None
            self._line += 1
            message = raw.rstrip(b"\r\n")
            if message:
                return SourceRecord(key=str(self._line).encode("ascii"), message=message)

    def close(self) -> None:
        if self._handle is not None:
            self._handle.close()
            self._handle = None
        if self._on_close is not None:
            self._on_close(self)
            self._on_close = None


class FileOutputSource(OutputSource):
    """Appends one line per record."""

    def __init__(self, path: Path, on_close: Optional[Callable[[Any], None]] = None) -> None:
        self.path = path
        self._on_close = on_close
        self._handle: Optional[IO[bytes]] = path.open("ab")

    def write(self, record: SourceRecord) -> None:
        if self._handle is None:
            raise ValueError(f"{self.path} is closed")
        self._handle.write(record.message.rstrip(b"\r\n") + b"\n")

    def close(self) -> None:
        if self._handle is not None:
            self._handle.close()
            self._handle = None
        if self._on_close is not None:
            self._on_close(self)
            self._on_close = None


class FileModule(Module):
    name = "file"
    prefix = "file"

    def __init__(self, config: ShellConfig) -> None:
        super().__init__()
        self.config = config
        self.cwd = Path(config.file_root).expanduser()
        self._open: Set[Any] = set()
        self._commands: List[Command] = [
            self.command(
                "fcat",
                self.cat,
                params=params("path", flags=[("-n", "count"), ("-d", "decoder")]),
                help="Print the records of a file",
            ),
            self.command("fls", self.list_dir, params=params("[dir]"), help="List files"),
            self.command("fcd", self.change_dir, params=params("dir"), help="Change the file directory", prompt_aware=True),
            self.command("fpwd", self.print_dir, help="Show the file directory"),
        ]

    def get_commands(self) -> List[Command]:
        return list(self._commands)

    def prompt(self) -> str:
        return f"{self.name}:{self.cwd}"

    def resolve(self, path: str) -> Path:
        candidate = Path(path).expanduser()
        if not candidate.is_absolute():
            candidate = self.cwd / candidate
        return candidate

    def _path_of(self, url: str) -> Path:
        _, path = parse_source_url(url)
        return self.resolve(path)

    def get_input_source(self, url: str) -> Optional[InputSource]:
        path = self._path_of(url)
        if not path.is_file():
            LOGGER.debug("no input file at %s", path)
            return None
        source = FileInputSource(path, on_close=self._open.discard)
        self._open.add(source)
        return source

    def get_output_source(self, url: str) -> Optional[OutputSource]:
        path = self._path_of(url)
        if path.is_dir() or not path.parent.is_dir():
            LOGGER.debug("cannot write records to %s", path)
            return None
        target = FileOutputSource(path, on_close=self._open.discard)
        self._open.add(target)
        return target

    def cat(self, args: UnixArgs) -> List[Any]:
        url = with_default_prefix(self.prefix, args.args[0])
        limit = args.int_flag("-n")
        reference = args.flag("-d", "text")
        decoder = self.runtime.resolve_decoder(reference)
        if decoder is None:
            raise InvalidArguments("fcat", f"unknown decoder {reference!r}")
        source = self.runtime.get_input_handler(url)
        if source is None:
            raise SourceNotFound(url)
        values: List[Any] = []
        with source:
            for record in source:
                if limit is not None and len(values) >= limit:
                    break
                values.append(decoder.decode(record.message))
        return values

    def list_dir(self, args: UnixArgs) -> List[Dict[str, Any]]:
        directory = self.resolve(args.args[0]) if args.args else self.cwd
        if not directory.is_dir():
            raise InvalidArguments("fls", f"{directory} is not a directory")
        entries = []
        for entry in sorted(directory.iterdir()):
            entries.append(
                {
                    "name": entry.name,
                    "type": "dir" if entry.is_dir() else "file",
                    "size": entry.stat().st_size if entry.is_file() else None,
                }
            )
        return entries

    def change_dir(self, args: UnixArgs) -> str:
        directory = self.resolve(args.args[0]).resolve()
        if not directory.is_dir():
            raise InvalidArguments("fcd", f"{directory} is not a directory")
        self.cwd = directory
        return str(directory)

    def print_dir(self, args: UnixArgs) -> str:
        return str(self.cwd)

    def shutdown(self) -> None:
        handles = list(self._open)
        for handle in handles:
            handle.close()
