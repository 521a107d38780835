"""Built-in ``core`` module: session-level commands."""

from __future__ import annotations

from typing import Any, Dict, List

from .. import __version__
from ..codecs import builtin_names
from ..config import ShellConfig
from ..errors import InvalidArguments, SourceNotFound
from ..parser import UnixArgs, params
from .base import Command, Module


class CoreModule(Module):
    name = "core"
    prefix = "core"

    def __init__(self, config: ShellConfig) -> None:
        super().__init__()
        self.config = config
        self._commands: List[Command] = [
            self.command("help", self.help, params=params("[command]"), help="Show available commands"),
            self.command("?", self.help, params=params("[command]"), help="Alias for help"),
            self.command("modules", self.list_modules, help="List loaded modules"),
            self.command("use", self.use, params=params("module"), help="Switch the active module"),
            self.command("decoders", self.list_decoders, help="List registered decoders"),
            self.command(
                "autoswitch",
                self.autoswitch,
                params=params("[state]"),
                help="Show or set module auto-switching (on|off)",
            ),
            self.command(
                "copy",
                self.copy,
                params=params("source", "target", flags=[("-n", "count")]),
                help="Copy records between source URLs",
            ),
            self.command("version", self.version, help="Show the shell version"),
            self.command("exit", self.exit, help="Exit the shell"),
        ]

    def get_commands(self) -> List[Command]:
        return list(self._commands)

    def help(self, args: UnixArgs) -> Any:
        commands = self.runtime.module_manager.command_set
        if args.args:
            name = args.args[0]
            command = commands.get(name)
            if command is None:
                raise InvalidArguments("help", f"no such command {name!r}")
            return f"{command.usage()}\n  {command.help} (module: {command.module.name})"
        return "\n".join(commands[name].format_help() for name in sorted(commands))

    def list_modules(self, args: UnixArgs) -> List[Dict[str, Any]]:
        manager = self.runtime.module_manager
        active = manager.active_module
        return [
            {
                "name": module.name,
                "prefix": module.prefix,
                "commands": len(module.get_commands()),
                "active": module is active,
            }
            for module in manager.modules
        ]

    def use(self, args: UnixArgs) -> str:
        name = args.args[0]
        module = self.runtime.module_manager.find_by_name(name)
        if module is None:
            raise InvalidArguments("use", f"no such module {name!r}")
        self.runtime.module_manager.set_active_module(module)
        return f"active module is now '{module.name}'"

    def list_decoders(self, args: UnixArgs) -> Dict[str, Any]:
        # force the configured topic decoders to be installed
        self.runtime.resolve_decoder("")
        registered = self.runtime.decoders.snapshot()
        return {
            "registered": {name: decoder.name for name, decoder in sorted(registered.items())},
            "builtin": builtin_names(),
            "unresolved": [
                {"topic": entry.topic, "reference": entry.reference, "error": entry.error}
                for entry in self.config.get_decoders()
                if entry.decoder is None
            ],
        }

    def autoswitch(self, args: UnixArgs) -> str:
        if args.args:
            state = args.args[0].lower()
            if state not in ("on", "off"):
                raise InvalidArguments("autoswitch", f"expected on or off, got {state!r}")
            self.config.auto_switching = state == "on"
        return f"auto-switching is {'on' if self.config.auto_switching else 'off'}"

    def copy(self, args: UnixArgs) -> str:
        source_url, target_url = args.args
        limit = args.int_flag("-n")
        source = self.runtime.get_input_handler(source_url)
        if source is None:
            raise SourceNotFound(source_url)
        target = self.runtime.get_output_handler(target_url)
        if target is None:
            source.close()
            raise SourceNotFound(target_url)
        copied = 0
        with source, target:
            for record in source:
                if limit is not None and copied >= limit:
                    break
                target.write(record)
                copied += 1
        return f"{copied} record(s) copied from {source_url} to {target_url}"

    def version(self, args: UnixArgs) -> str:
        return f"polyshell {__version__}"

    def exit(self, args: UnixArgs) -> None:
        raise SystemExit(0)
