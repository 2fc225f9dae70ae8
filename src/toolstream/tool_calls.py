"""Aggregation of streamed tool-call deltas."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Callable, Iterable

from .errors import ToolArgumentsError
from .json_checker import JsonChecker

logger = logging.getLogger(__name__)


@dataclass
class ToolCall:
    """A tool call requested by the model."""

    id: str
    name: str
    args: dict


def _delta_fields(delta: Any) -> tuple[int, str, str, str]:
    """Return (index, id, name, arguments) from an SDK delta or a plain dict."""
    if isinstance(delta, dict):
        function = delta.get("function") or {}
        return (
            delta.get("index") or 0,
            delta.get("id") or "",
            function.get("name") or "",
            function.get("arguments") or "",
        )

    function = getattr(delta, "function", None)
    return (
        getattr(delta, "index", None) or 0,
        getattr(delta, "id", None) or "",
        (function.name or "") if function else "",
        (function.arguments or "") if function else "",
    )


class ToolCallAccumulator:
    """Collects tool-call deltas and reports each call as soon as it is usable.

    Every tool-call index gets its own :class:`JsonChecker`. The moment a
    call's arguments form a balanced object they are parsed and, if they
    parse, ``on_complete`` is invoked with the resulting :class:`ToolCall`,
    without waiting for the rest of the stream.

    Args:
        on_complete: Callable(ToolCall) invoked once per call whose arguments
            complete while streaming.
        stop_after_complete: Stop tracking a call's argument fragments once it
            has been dispatched. Fragments are still recorded in ``raw_calls``.
    """

    def __init__(
        self,
        on_complete: Callable[[ToolCall], None] | None = None,
        stop_after_complete: bool = True,
    ) -> None:
        self._on_complete = on_complete
        self._stop_after_complete = stop_after_complete
        self._raw: list[dict] = []
        self._checkers: list[JsonChecker] = []
        self._ready: dict[int, ToolCall] = {}

    def __len__(self) -> int:
        return len(self._raw)

    @property
    def raw_calls(self) -> list[dict]:
        """Aggregated calls in OpenAI ``tool_calls`` message format."""
        return self._raw

    @property
    def ready(self) -> list[ToolCall]:
        """Calls already dispatched, in index order."""
        return [self._ready[idx] for idx in sorted(self._ready)]

    @property
    def pending(self) -> list[int]:
        """Indices whose arguments have not been dispatched yet."""
        return [idx for idx in range(len(self._raw)) if idx not in self._ready]

    def is_complete(self, index: int) -> bool:
        if index >= len(self._checkers):
            return False
        return self._checkers[index].is_complete()

    def feed(self, deltas: Iterable[Any]) -> None:
        """Add a batch of tool-call deltas from one stream chunk."""
        for delta in deltas:
            self._feed_one(delta)

    def _feed_one(self, delta: Any) -> None:
        idx, call_id, name, arguments = _delta_fields(delta)

        while len(self._raw) <= idx:
            self._raw.append(
                {
                    "id": "",
                    "type": "function",
                    "function": {"name": "", "arguments": ""},
                }
            )
            self._checkers.append(JsonChecker())

        rtc = self._raw[idx]
        if call_id:
            rtc["id"] += call_id
        if name:
            rtc["function"]["name"] += name
        if not arguments:
            return
        rtc["function"]["arguments"] += arguments

        if idx in self._ready and self._stop_after_complete:
            return

        checker = self._checkers[idx]
        checker.append(arguments)
        if checker.is_complete() and idx not in self._ready:
            self._dispatch(idx)

    def _dispatch(self, idx: int) -> None:
        rtc = self._raw[idx]
        text = self._checkers[idx].buffer()
        try:
            args = json.loads(text)
        except json.JSONDecodeError as e:
            logger.warning(
                "Balanced tool call arguments failed to parse (index %d): %s",
                idx,
                e,
            )
            return

        tool_call = ToolCall(id=rtc["id"], name=rtc["function"]["name"], args=args)
        self._ready[idx] = tool_call
        logger.debug(
            "Tool call %d (%s) complete after %d chars", idx, tool_call.name, len(text)
        )
        if self._on_complete:
            self._on_complete(tool_call)

    def finalize(self, strict: bool = False) -> list[ToolCall]:
        """Return one :class:`ToolCall` per streamed index, in order.

        Calls whose arguments are missing become ``{}``. Calls whose arguments
        are incomplete or unparseable raise :class:`ToolArgumentsError` when
        ``strict`` is set, otherwise they are logged and become ``{}``.
        """
        tool_calls: list[ToolCall] = []
        for idx, rtc in enumerate(self._raw):
            if idx in self._ready:
                tool_calls.append(self._ready[idx])
                continue

            name = rtc["function"]["name"]
            raw_args = rtc["function"]["arguments"]
            checker = self._checkers[idx]
            text = checker.buffer() if checker.is_complete() else raw_args

            args: Any = {}
            if text.strip():
                try:
                    args = json.loads(text)
                    if not isinstance(args, dict):
                        raise ValueError("arguments are not a JSON object")
                except ValueError as e:
                    if not checker.is_complete():
                        reason = "arguments incomplete"
                    elif isinstance(e, json.JSONDecodeError):
                        reason = "arguments are not valid JSON"
                    else:
                        reason = str(e)
                    if strict:
                        raise ToolArgumentsError(idx, name, raw_args, reason) from e
                    logger.warning(
                        "Failed to parse tool call arguments (%s): %r", reason, raw_args
                    )
                    args = {}

            tool_calls.append(ToolCall(id=rtc["id"], name=name, args=args))
        return tool_calls

    def reset(self) -> None:
        self._raw = []
        self._checkers = []
        self._ready = {}
