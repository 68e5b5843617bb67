"""Total extraction functions over the untyped chunks an agent engine streams.

Nothing in this module raises on unexpected shapes: a chunk that matches no
known layout degrades to an unmoded payload, and any part of a payload that
is not recognized simply contributes no output.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass
import logging
from typing import Any

from pydantic import BaseModel

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClassifiedChunk:
    mode: str | None
    payload: Any


@dataclass(frozen=True)
class ToolCall:
    name: str
    input: Any
    id: str | None = None


@dataclass(frozen=True)
class ToolResult:
    name: str
    output: Any
    id: str | None = None


def is_sequence(value: Any) -> bool:
    return isinstance(value, (list, tuple))


def as_record(value: Any) -> Mapping[str, Any] | None:
    """Return the key/value view of a record, or ``None`` for non-records.

    Plain mappings are records as-is; pydantic models (LangChain messages and
    content blocks) are viewed through their fields without copying nested values.
    """

    if isinstance(value, Mapping):
        return value
    if isinstance(value, BaseModel):
        return dict(value)
    return None


def classify_chunk(raw_chunk: Any) -> ClassifiedChunk:
    match raw_chunk:
        case [str() as mode, payload]:
            return ClassifiedChunk(mode=mode, payload=payload)
        case [list() | tuple(), str() as mode, payload]:
            return ClassifiedChunk(mode=mode, payload=payload)
        case _:
            if is_sequence(raw_chunk):
                logger.debug("unrecognized chunk shape", extra={"chunk_length": len(raw_chunk)})
            return ClassifiedChunk(mode=None, payload=raw_chunk)


def walk_records(root: Any) -> Iterator[Mapping[str, Any]]:
    """Depth-first walk yielding every record in ``root``.

    Sequences are descended into but never yielded. Each container is entered
    at most once, so shared references and cycles are safe.
    """

    stack: list[Any] = [root]
    seen: set[int] = set()

    while stack:
        current = stack.pop()
        record = None if is_sequence(current) else as_record(current)
        if record is None and not is_sequence(current):
            continue
        if id(current) in seen:
            continue
        seen.add(id(current))

        if record is None:
            stack.extend(reversed(current))
            continue

        yield record
        stack.extend(reversed(list(record.values())))


def extract_text(content: Any) -> list[str]:
    if isinstance(content, str):
        return [content] if content else []

    if not is_sequence(content):
        return []

    parts: list[str] = []
    for item in content:
        if isinstance(item, str):
            if item:
                parts.append(item)
            continue

        record = as_record(item)
        if record is None:
            continue
        text = record.get("text")
        if isinstance(text, str) and text:
            parts.append(text)
    return parts


def message_candidate(payload: Any) -> Any:
    if is_sequence(payload) and len(payload) > 0:
        return payload[0]
    return payload


def extract_tool_calls(payload: Any) -> list[ToolCall]:
    calls: list[ToolCall] = []
    for record in walk_records(payload):
        tool_calls = record.get("tool_calls")
        if not is_sequence(tool_calls):
            continue

        for entry in tool_calls:
            entry_record = as_record(entry)
            if entry_record is None:
                continue
            name = entry_record.get("name")
            if not isinstance(name, str) or not name:
                logger.debug("dropping tool call without a name")
                continue

            call_input = _first_present(entry_record, "args", "input", default={})
            call_id = entry_record.get("id")
            calls.append(ToolCall(name=name, input=call_input, id=call_id if isinstance(call_id, str) else None))
    return calls


def extract_tool_results(payload: Any) -> list[ToolResult]:
    results: list[ToolResult] = []
    for record in walk_records(payload):
        tool_call_id = record.get("tool_call_id")
        if not isinstance(tool_call_id, str) and record.get("type") != "tool":
            continue

        name = record.get("name")
        results.append(
            ToolResult(
                name=name if isinstance(name, str) and name else "unknown_tool",
                output=_first_present(record, "content", "output", default=None),
                id=tool_call_id if isinstance(tool_call_id, str) else None,
            )
        )
    return results


def _first_present(record: Mapping[str, Any], *keys: str, default: Any) -> Any:
    for key in keys:
        value = record.get(key)
        if value is not None:
            return value
    return default
