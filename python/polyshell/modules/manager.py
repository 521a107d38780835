"""Registry of loaded modules, the active module and the merged command set."""

from __future__ import annotations

import logging
import threading
from typing import Dict, Iterable, List, Optional

from ..errors import ModuleTeardownFailure
from .base import Command, Module

LOGGER = logging.getLogger("polyshell.modules")


class ModuleManager:
    """Stores modules in registration order and resolves them by name or prefix.

    Neither names nor prefixes are checked for uniqueness. Lookups return the
    first registered match, while the command set lets a later module's
    command replace an earlier one of the same name.
    """

    def __init__(self) -> None:
        self._modules: List[Module] = []
        self._lock = threading.Lock()
        self._command_set: Optional[Dict[str, Command]] = None
        self._active: Optional[Module] = None
        self._active_lock = threading.Lock()
        self._shut_down: set[int] = set()

    def register(self, modules: Iterable[Module]) -> None:
        with self._lock:
            for module in modules:
                LOGGER.debug("registering module %s (prefix %s)", module.name, module.prefix)
                self._modules.append(module)
            self._command_set = None

    def __iadd__(self, modules: Iterable[Module]) -> "ModuleManager":
        self.register(modules)
        return self

    @property
    def modules(self) -> List[Module]:
        with self._lock:
            return list(self._modules)

    def find_by_name(self, name: str) -> Optional[Module]:
        for module in self.modules:
            if module.name == name:
                return module
        return None

    def find_by_prefix(self, prefix: str) -> Optional[Module]:
        for module in self.modules:
            if module.prefix == prefix:
                return module
        return None

    @property
    def active_module(self) -> Optional[Module]:
        with self._active_lock:
            return self._active

    def set_active_module(self, module: Optional[Module]) -> None:
        with self._active_lock:
            if module is not self._active:
                LOGGER.debug("active module -> %s", module.name if module else None)
            self._active = module

    @property
    def command_set(self) -> Dict[str, Command]:
        """Commands of every module keyed by name; later registrations win."""
        with self._lock:
            if self._command_set is None:
                merged: Dict[str, Command] = {}
                for module in self._modules:
                    for command in module.get_commands():
                        previous = merged.get(command.name)
                        if previous is not None and previous.module is not module:
                            LOGGER.debug(
                                "command %s from %s replaces the one from %s",
                                command.name,
                                module.name,
                                previous.module.name,
                            )
                        merged[command.name] = command
                self._command_set = merged
            return dict(self._command_set)

    def find_command(self, name: str) -> Optional[Command]:
        return self.command_set.get(name)

    def shutdown(self) -> List[ModuleTeardownFailure]:
        """Shut down every module, continuing past failures.

        Modules that already shut down cleanly are skipped on later calls;
        failed ones are retried.
        """
        failures: List[ModuleTeardownFailure] = []
        for module in self.modules:
            if id(module) in self._shut_down:
                continue
            try:
                module.shutdown()
            except Exception as exc:
                failure = ModuleTeardownFailure(module.name, str(exc) or type(exc).__name__)
                failure.__cause__ = exc
                LOGGER.error("%s", failure, exc_info=exc)
                failures.append(failure)
                continue
            self._shut_down.add(id(module))
        return failures


__all__ = ["ModuleManager"]
