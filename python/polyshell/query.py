"""Minimal ``select`` statement support.

Grammar::

    select <field>[, <field>...] | *
      from <source-url>
      [with <decoder-reference>]
      [where <field> <op> <value> [and ...]]
      [limit <n>]

A bare source (no ``prefix:``) is scoped to the active module's prefix.
"""

from __future__ import annotations

import logging
import operator
import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Mapping, Optional, Sequence

from .errors import InvalidArguments, QuerySyntaxError, SourceNotFound
from .sources import parse_source_url, with_default_prefix

if TYPE_CHECKING:  # pragma: no cover
    from .decoders import MessageDecoder
    from .runtime import RuntimeSession

LOGGER = logging.getLogger("polyshell.query")

_STATEMENT = re.compile(
    r"^select\s+(?P<fields>.+?)\s+from\s+(?P<source>\S+)"
    r"(?:\s+with\s+(?P<decoder>\S+))?"
    r"(?:\s+where\s+(?P<where>.+?))?"
    r"(?:\s+limit\s+(?P<limit>\S+))?\s*$",
    re.IGNORECASE | re.DOTALL,
)
_CONDITION = re.compile(r"^(?P<field>[\w.$-]+)\s*(?P<op>==|!=|<>|>=|<=|=|>|<)\s*(?P<value>.+)$")
_AND = re.compile(r"\s+and\s+", re.IGNORECASE)

_OPERATORS: Dict[str, Callable[[Any, Any], bool]] = {
    "=": operator.eq,
    "==": operator.eq,
    "!=": operator.ne,
    "<>": operator.ne,
    ">": operator.gt,
    ">=": operator.ge,
    "<": operator.lt,
    "<=": operator.le,
}


def _literal(text: str) -> Any:
    text = text.strip()
    if len(text) >= 2 and text[0] == text[-1] and text[0] in "'\"":
        return text[1:-1]
    lowered = text.lower()
    if lowered in ("true", "false"):
        return lowered == "true"
    if lowered == "null":
        return None
    for cast in (int, float):
        try:
            return cast(text)
        except ValueError:
            continue
    return text


def _lookup(row: Mapping[str, Any], path: str) -> Any:
    value: Any = row
    for part in path.split("."):
        if not isinstance(value, Mapping) or part not in value:
            return None
        value = value[part]
    return value


@dataclass(frozen=True)
class Condition:
    field: str
    op: str
    value: Any

    def matches(self, row: Mapping[str, Any]) -> bool:
        actual = _lookup(row, self.field)
        try:
            return bool(_OPERATORS[self.op](actual, self.value))
        except TypeError:
            return False


@dataclass
class QueryResult:
    fields: List[str]
    rows: List[Dict[str, Any]] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.rows)


@dataclass
class Query:
    fields: List[str]
    source: str
    decoder: Optional[str] = None
    conditions: List[Condition] = field(default_factory=list)
    limit: Optional[int] = None

    def source_url(self, runtime: "RuntimeSession") -> str:
        active = runtime.active_module
        return with_default_prefix(active.prefix, self.source) if active else self.source

    def _resolve_decoder(self, runtime: "RuntimeSession", url: str) -> "MessageDecoder":
        if self.decoder:
            decoder = runtime.resolve_decoder(self.decoder)
            if decoder is None:
                raise InvalidArguments("select", f"unknown decoder {self.decoder!r}")
            return decoder
        _, path = parse_source_url(url)
        topic = path.rstrip("/").rsplit("/", 1)[-1].split(".", 1)[0]
        decoder = runtime.resolve_decoder(topic) if topic else None
        if decoder is None:
            decoder = runtime.resolve_decoder("json")
        if decoder is None:
            raise InvalidArguments("select", f"no decoder available for {url}")
        return decoder

    def execute(self, runtime: "RuntimeSession") -> QueryResult:
        url = self.source_url(runtime)
        decoder = self._resolve_decoder(runtime, url)
        source = runtime.get_input_handler(url)
        if source is None:
            raise SourceNotFound(url)
        LOGGER.debug("query %s using decoder %s", url, decoder.name)
        rows: List[Dict[str, Any]] = []
        with source:
            for record in source:
                if self.limit is not None and len(rows) >= self.limit:
                    break
                value = decoder.decode(record.message)
                row = dict(value) if isinstance(value, Mapping) else {"value": value}
                if not all(condition.matches(row) for condition in self.conditions):
                    continue
                rows.append(self._project(row))
        fields = self.fields if self.fields != ["*"] else self._all_fields(rows)
        return QueryResult(fields=fields, rows=rows)

    def _project(self, row: Dict[str, Any]) -> Dict[str, Any]:
        if self.fields == ["*"]:
            return row
        return {name: _lookup(row, name) for name in self.fields}

    @staticmethod
    def _all_fields(rows: Sequence[Mapping[str, Any]]) -> List[str]:
        seen: Dict[str, None] = {}
        for row in rows:
            for key in row:
                seen.setdefault(key, None)
        return list(seen)


class QueryParser:
    @staticmethod
    def parse(text: str) -> Query:
        match = _STATEMENT.match(text.strip())
        if not match:
            raise QuerySyntaxError(f"malformed query: {text.strip()!r}")
        fields = [name.strip() for name in match.group("fields").split(",")]
        if not all(fields) or ("*" in fields and len(fields) > 1):
            raise QuerySyntaxError(f"invalid field list: {match.group('fields')!r}")
        conditions = QueryParser._conditions(match.group("where"))
        limit = None
        if match.group("limit") is not None:
            try:
                limit = int(match.group("limit"))
            except ValueError as exc:
                raise QuerySyntaxError(f"limit must be an integer, got {match.group('limit')!r}") from exc
            if limit < 0:
                raise QuerySyntaxError("limit must not be negative")
        return Query(
            fields=fields,
            source=match.group("source"),
            decoder=match.group("decoder"),
            conditions=conditions,
            limit=limit,
        )

    @staticmethod
    def _conditions(clause: Optional[str]) -> List[Condition]:
        if not clause:
            return []
        conditions: List[Condition] = []
        for part in _AND.split(clause.strip()):
            match = _CONDITION.match(part.strip())
            if not match:
                raise QuerySyntaxError(f"invalid condition: {part.strip()!r}")
            conditions.append(Condition(match.group("field"), match.group("op"), _literal(match.group("value"))))
        return conditions


__all__ = ["Query", "QueryParser", "QueryResult", "Condition"]
