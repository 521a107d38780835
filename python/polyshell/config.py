"""Shell configuration loaded from a JSON file."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from .codecs import builtin_decoder
from .decoders import MessageDecoder
from .errors import ConfigError

LOGGER = logging.getLogger("polyshell.config")

DEFAULT_CONFIG_PATH = Path.home() / ".polyshell" / "config.json"
DEFAULT_HISTORY_PATH = Path.home() / ".polyshell" / "history"


@dataclass(frozen=True)
class TopicDecoder:
    """One configured decoder for a topic.

    ``decoder`` is None when ``reference`` could not be resolved; ``error``
    then explains why.
    """

    topic: str
    reference: str
    decoder: Optional[MessageDecoder] = None
    error: Optional[str] = None


@dataclass
class ShellConfig:
    auto_switching: bool = False
    json_output: bool = False
    history_file: Optional[Path] = None
    file_root: Path = field(default_factory=Path.cwd)
    decoders: Dict[str, List[str]] = field(default_factory=dict)
    path: Optional[Path] = None
    _resolved: Optional[List[TopicDecoder]] = field(default=None, init=False, repr=False)

    def get_decoders(self) -> List[TopicDecoder]:
        """Return configured decoders in declaration order."""
        if self._resolved is None:
            entries: List[TopicDecoder] = []
            for topic, references in self.decoders.items():
                for reference in references:
                    decoder = builtin_decoder(reference)
                    if decoder is None:
                        LOGGER.warning("topic %s: unsupported decoder reference %r", topic, reference)
                        entries.append(TopicDecoder(topic, reference, error=f"unsupported decoder reference {reference!r}"))
                    else:
                        entries.append(TopicDecoder(topic, reference, decoder=decoder))
            self._resolved = entries
        return list(self._resolved)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "auto_switching": self.auto_switching,
            "json_output": self.json_output,
            "history_file": str(self.history_file) if self.history_file else None,
            "file_root": str(self.file_root),
            "decoders": {topic: list(refs) for topic, refs in self.decoders.items()},
        }


def _parse_decoders(raw: Any) -> Dict[str, List[str]]:
    if raw is None:
        return {}
    if not isinstance(raw, Mapping):
        raise ConfigError("'decoders' must map topic names to decoder lists")
    decoders: Dict[str, List[str]] = {}
    for topic, refs in raw.items():
        if isinstance(refs, str):
            refs = [refs]
        if not isinstance(refs, list) or not all(isinstance(ref, str) for ref in refs):
            raise ConfigError(f"decoders for topic {topic!r} must be a string or list of strings")
        decoders[str(topic)] = list(refs)
    return decoders


def config_from_mapping(data: Mapping[str, Any], *, path: Optional[Path] = None) -> ShellConfig:
    history = data.get("history_file")
    root = data.get("file_root")
    return ShellConfig(
        auto_switching=bool(data.get("auto_switching", False)),
        json_output=bool(data.get("json_output", False)),
        history_file=Path(history).expanduser() if history else DEFAULT_HISTORY_PATH,
        file_root=Path(root).expanduser() if root else Path.cwd(),
        decoders=_parse_decoders(data.get("decoders")),
        path=path,
    )


def load_config(path: Optional[str] = None) -> ShellConfig:
    """Load configuration; a missing file yields the defaults."""
    candidate = Path(path or os.environ.get("POLYSHELL_CONFIG") or DEFAULT_CONFIG_PATH).expanduser()
    try:
        text = candidate.read_text(encoding="utf-8")
    except FileNotFoundError:
        LOGGER.debug("config %s not found; using defaults", candidate)
        return config_from_mapping({}, path=None)
    except OSError as exc:
        raise ConfigError(f"unable to read {candidate}: {exc}") from exc
    try:
        data = json.loads(text) if text.strip() else {}
    except json.JSONDecodeError as exc:
        raise ConfigError(f"invalid JSON in {candidate}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"{candidate}: top level must be an object")
    LOGGER.info("loaded configuration from %s", candidate)
    return config_from_mapping(data, path=candidate)


__all__ = ["ShellConfig", "TopicDecoder", "load_config", "config_from_mapping", "DEFAULT_CONFIG_PATH"]
