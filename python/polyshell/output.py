"""Output helpers for polyshell."""

from __future__ import annotations

import json
from typing import Any, Dict, List, Mapping, Optional, Sequence

from .query import QueryResult
from .result import Failure, Result


def _json_dump(payload: Any) -> str:
    return json.dumps(payload, indent=2, sort_keys=True, default=_json_default)


def _json_default(value: Any) -> Any:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).hex()
    if isinstance(value, QueryResult):
        return {"fields": value.fields, "rows": value.rows}
    return str(value)


def emit_result(value: Any, *, json_output: bool = False) -> None:
    """Emit a successful command result."""
    if json_output:
        print(_json_dump({"status": "ok", "result": value}))
        return
    for line in render(value):
        print(line)


def emit_error(message: str, *, json_output: bool = False, data: Optional[Mapping[str, Any]] = None) -> None:
    """Emit an error message respecting JSON mode."""
    if json_output:
        payload: Dict[str, Any] = {"status": "error", "error": message}
        if data:
            payload["details"] = dict(data)
        print(_json_dump(payload))
    else:
        print(f"error: {message}")


def emit(result: Result, *, json_output: bool = False) -> int:
    """Print an interpret() result; returns a process-style exit code."""
    if isinstance(result, Failure):
        emit_error(result.message, json_output=json_output, data={"kind": type(result.error).__name__})
        return 1
    if result.value is not None:
        emit_result(result.value, json_output=json_output)
    return 0


def render(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, QueryResult):
        return render_table(value.fields, value.rows)
    if isinstance(value, str):
        return value.splitlines() or [""]
    if isinstance(value, (bytes, bytearray)):
        return [bytes(value).hex()]
    if isinstance(value, Mapping):
        return _json_dump(value).splitlines()
    if isinstance(value, Sequence):
        items = list(value)
        if items and all(isinstance(item, Mapping) for item in items):
            fields: Dict[str, None] = {}
            for item in items:
                for key in item:
                    fields.setdefault(str(key), None)
            return render_table(list(fields), items)
        lines: List[str] = []
        for item in items:
            lines.extend(render(item) if not isinstance(item, str) else [item])
        return lines
    return [str(value)]


def render_table(fields: Sequence[str], rows: Sequence[Mapping[str, Any]]) -> List[str]:
    """Render rows as a plain text table."""
    if not rows:
        return ["  (no rows)"]
    cells = [[_cell(row.get(name)) for name in fields] for row in rows]
    widths = [max([len(name)] + [len(line[idx]) for line in cells]) for idx, name in enumerate(fields)]
    header = " | ".join(name.ljust(widths[idx]) for idx, name in enumerate(fields))
    lines = [header, "-+-".join("-" * width for width in widths)]
    for line in cells:
        lines.append(" | ".join(value.ljust(widths[idx]) for idx, value in enumerate(line)))
    return [entry.rstrip() for entry in lines]


def _cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (dict, list)):
        return json.dumps(value, sort_keys=True, default=str)
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).hex()
    return str(value)


__all__ = ["emit", "emit_result", "emit_error", "render", "render_table"]
