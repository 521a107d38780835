"""Resolution of decoder reference strings."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable, Dict, Optional

from .decoders import CompositeDecoder, HexDecoder, JsonDecoder, MessageDecoder, RawDecoder, TextDecoder

if TYPE_CHECKING:  # pragma: no cover
    from .config import ShellConfig

LOGGER = logging.getLogger("polyshell.codecs")

_BUILTIN: Dict[str, Callable[[], MessageDecoder]] = {
    "json": JsonDecoder,
    "text": TextDecoder,
    "utf8": TextDecoder,
    "string": TextDecoder,
    "raw": RawDecoder,
    "bytes": RawDecoder,
    "hex": HexDecoder,
}


def builtin_decoder(reference: str) -> Optional[MessageDecoder]:
    """Return a fresh built-in decoder for *reference*, or None."""
    factory = _BUILTIN.get(reference.strip().lower())
    return factory() if factory else None


def builtin_names() -> list[str]:
    return sorted(_BUILTIN)


def get_decoder(config: "ShellConfig", reference: str) -> Optional[MessageDecoder]:
    """Resolve a decoder reference such as ``json`` or ``topic:quotes``."""
    if not reference:
        return None
    decoder = builtin_decoder(reference)
    if decoder is not None:
        return decoder
    scheme, sep, rest = reference.partition(":")
    if sep and scheme == "topic" and rest:
        candidates = [entry.decoder for entry in config.get_decoders() if entry.topic == rest and entry.decoder]
        if candidates:
            return CompositeDecoder(rest, candidates)
        return None
    LOGGER.debug("no codec for reference %r", reference)
    return None


__all__ = ["builtin_decoder", "builtin_names", "get_decoder"]
