"""Runtime session: command interpretation, module routing and decoder lookup."""

from __future__ import annotations

import logging
import shlex
import subprocess
from typing import Any, Dict, Iterable, List, Optional

from . import codecs
from .config import ShellConfig
from .decoders import CompositeDecoder, DecoderRegistry, MessageDecoder
from .errors import CommandNotFound, ModuleTeardownFailure, PassthroughFailure, ShellError
from .modules.base import Module
from .modules.manager import ModuleManager
from .parser import parse_tokens, parse_unix_args
from .result import Failure, Result, Success
from .sources import InputSource, OutputSource, parse_source_url, with_default_prefix

LOGGER = logging.getLogger("polyshell.runtime")

QUERY_KEYWORD = "select"
CORE_MODULE = "core"


def default_modules(config: ShellConfig) -> List[Module]:
    from .modules.core import CoreModule
    from .modules.files import FileModule

    return [CoreModule(config), FileModule(config)]


class RuntimeSession:
    """Owns the modules and decoders of one interactive session."""

    def __init__(self, config: ShellConfig, modules: Optional[Iterable[Module]] = None) -> None:
        self.config = config
        self.decoders = DecoderRegistry()
        self.module_manager = ModuleManager()
        self._closed = False

        loaded = list(modules) if modules is not None else default_modules(config)
        self.module_manager.register(loaded)
        for module in loaded:
            module.bind(self)

        core = self.module_manager.find_by_name(CORE_MODULE)
        if core is not None:
            self.module_manager.set_active_module(core)

    def __enter__(self) -> "RuntimeSession":
        return self

    def __exit__(self, *exc_info) -> None:
        self.shutdown()

    # ------------------------------------------------------------------
    # Decoders
    # ------------------------------------------------------------------
    def _install_topic_decoders(self, registry: DecoderRegistry) -> None:
        by_topic: Dict[str, List[MessageDecoder]] = {}
        for entry in self.config.get_decoders():
            if entry.decoder is not None:
                by_topic.setdefault(entry.topic, []).append(entry.decoder)
        for topic, decoders in by_topic.items():
            LOGGER.debug("topic %s: composite of %s", topic, [d.name for d in decoders])
            registry.register(topic, CompositeDecoder(topic, decoders))

    def resolve_decoder(self, topic_or_url: str) -> Optional[MessageDecoder]:
        """Resolve a topic name or decoder reference to a decoder, if any."""
        self.decoders.bootstrap_once(self._install_topic_decoders)
        decoder = self.decoders.get(topic_or_url)
        if decoder is not None:
            return decoder
        return codecs.get_decoder(self.config, topic_or_url)

    def register_decoder(self, name: str, decoder: MessageDecoder) -> None:
        self.decoders.register(name, decoder)

    def lookup_decoder_by_name(self, name: str) -> Optional[MessageDecoder]:
        return self.decoders.get(name)

    # ------------------------------------------------------------------
    # Sources
    # ------------------------------------------------------------------
    def get_input_handler(self, url: str) -> Optional[InputSource]:
        """Return the input source for a URL such as ``file:/tmp/quotes.jsonl``."""
        prefix, _ = parse_source_url(url)
        module = self.module_manager.find_by_prefix(prefix)
        return module.get_input_source(url) if module else None

    def get_output_handler(self, url: str) -> Optional[OutputSource]:
        prefix, _ = parse_source_url(url)
        module = self.module_manager.find_by_prefix(prefix)
        return module.get_output_source(url) if module else None

    with_default_prefix = staticmethod(with_default_prefix)

    # ------------------------------------------------------------------
    # Interpretation
    # ------------------------------------------------------------------
    def interpret(self, line: str) -> Result:
        text = line.strip()
        if len(text) >= 2 and text.startswith("`") and text.endswith("`"):
            return self._execute_passthrough(text[1:-1])
        try:
            return Success(self._interpret_command_line(text))
        except ShellError as exc:
            LOGGER.debug("command failed: %s", exc)
            return Failure(exc)
        except Exception as exc:
            LOGGER.exception("unexpected failure running %r", text)
            return Failure(exc)

    def _execute_passthrough(self, command: str) -> Result:
        """Run a host command and capture its standard output.

        Blocks until the process exits; there is no timeout.
        """
        try:
            argv = shlex.split(command)
        except ValueError as exc:
            return Failure(PassthroughFailure(command, str(exc)))
        if not argv:
            return Failure(PassthroughFailure(command, "empty command"))
        try:
            completed = subprocess.run(argv, capture_output=True, text=True, errors="replace", check=False)
        except (OSError, ValueError, subprocess.SubprocessError) as exc:
            return Failure(PassthroughFailure(command, str(exc)))
        if completed.returncode != 0:
            reason = (completed.stderr or completed.stdout or "").strip()
            return Failure(PassthroughFailure(command, reason, completed.returncode))
        return Success(completed.stdout.rstrip("\r\n"))

    def _interpret_command_line(self, text: str) -> Any:
        if text.startswith(QUERY_KEYWORD):
            from .query import QueryParser

            return QueryParser.parse(text).execute(self)

        tokens = parse_tokens(text)
        unix_args = parse_unix_args(tokens)
        name = unix_args.command_name
        command = self.module_manager.find_command(name) if name else None
        if command is None:
            raise CommandNotFound(name)

        command.params.check_args(command.name, unix_args)
        result = command.fx(unix_args)

        if self.config.auto_switching and (command.prompt_aware or command.module.name != CORE_MODULE):
            self.module_manager.set_active_module(command.module)
        return result

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    @property
    def active_module(self) -> Optional[Module]:
        return self.module_manager.active_module

    def prompt(self) -> str:
        module = self.active_module
        return f"{module.prompt()}> " if module else "> "

    def shutdown(self) -> List[ModuleTeardownFailure]:
        if not self._closed:
            LOGGER.info("Shutting down...")
        failures = self.module_manager.shutdown()
        self._closed = not failures
        return failures


__all__ = ["RuntimeSession", "default_modules", "with_default_prefix"]
