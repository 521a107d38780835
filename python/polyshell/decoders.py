"""Message decoders and the per-session decoder registry."""

from __future__ import annotations

import json
import logging
import threading
from typing import Any, Callable, Dict, List, Optional, Sequence

from .errors import DecodeFailure

LOGGER = logging.getLogger("polyshell.decoders")


class MessageDecoder:
    """Turns a raw message payload into a structured value."""

    name = "decoder"

    def decode(self, message: bytes) -> Any:
        raise NotImplementedError("MessageDecoder must implement decode()")

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"


class JsonDecoder(MessageDecoder):
    name = "json"

    def decode(self, message: bytes) -> Any:
        return json.loads(message.decode("utf-8") if isinstance(message, (bytes, bytearray)) else message)


class TextDecoder(MessageDecoder):
    name = "text"

    def __init__(self, encoding: str = "utf-8") -> None:
        self.encoding = encoding

    def decode(self, message: bytes) -> Any:
        if isinstance(message, str):
            return message
        return bytes(message).decode(self.encoding)


class RawDecoder(MessageDecoder):
    name = "raw"

    def decode(self, message: bytes) -> Any:
        return bytes(message)


class HexDecoder(MessageDecoder):
    name = "hex"

    def decode(self, message: bytes) -> Any:
        return bytes(message).hex()


class CompositeDecoder(MessageDecoder):
    """Tries each decoder in declared order; the first success wins.

    When every candidate fails the last candidate's failure is reported.
    """

    def __init__(self, topic: str, decoders: Sequence[MessageDecoder]) -> None:
        self.topic = topic
        self.decoders: List[MessageDecoder] = list(decoders)
        self.name = f"composite:{topic}"

    def decode(self, message: bytes) -> Any:
        last_error: Optional[BaseException] = None
        for decoder in self.decoders:
            try:
                return decoder.decode(message)
            except Exception as exc:
                LOGGER.debug("decoder %s rejected message for %s: %s", decoder.name, self.topic, exc)
                last_error = exc
        if last_error is None:
            raise DecodeFailure(self.topic, "no decoders")
        raise DecodeFailure(self.topic, f"{type(last_error).__name__}: {last_error}") from last_error


class DecoderRegistry:
    """Thread-safe name -> decoder mapping with a one-time bootstrap gate."""

    def __init__(self) -> None:
        self._decoders: Dict[str, MessageDecoder] = {}
        self._lock = threading.Lock()
        self._bootstrap_lock = threading.Lock()
        self._bootstrapped = False

    def register(self, name: str, decoder: MessageDecoder) -> None:
        with self._lock:
            self._decoders[name] = decoder

    def get(self, name: str) -> Optional[MessageDecoder]:
        with self._lock:
            return self._decoders.get(name)

    def names(self) -> List[str]:
        with self._lock:
            return sorted(self._decoders)

    def snapshot(self) -> Dict[str, MessageDecoder]:
        with self._lock:
            return dict(self._decoders)

    @property
    def bootstrapped(self) -> bool:
        return self._bootstrapped

    def bootstrap_once(self, populate: Callable[["DecoderRegistry"], None]) -> bool:
        """Run *populate* exactly once; concurrent callers wait for it to finish.

        Returns True for the caller that performed the bootstrap.
        """
        if self._bootstrapped:
            return False
        with self._bootstrap_lock:
            if self._bootstrapped:
                return False
            try:
                populate(self)
            finally:
                # a failing populate is not retried
                self._bootstrapped = True
            return True


__all__ = [
    "MessageDecoder",
    "JsonDecoder",
    "TextDecoder",
    "RawDecoder",
    "HexDecoder",
    "CompositeDecoder",
    "DecoderRegistry",
]
