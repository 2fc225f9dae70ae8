"""Exceptions raised by toolstream."""

from __future__ import annotations


class ToolstreamError(Exception):
    """Base class for toolstream errors."""


class ToolArgumentsError(ToolstreamError):
    """Tool-call arguments were incomplete or not valid JSON.

    Args:
        index: Position of the tool call in the streamed response
        name: Tool name as streamed so far
        raw: The argument text that failed to parse
        reason: Short description of the failure
    """

    def __init__(self, index: int, name: str, raw: str, reason: str) -> None:
        self.index = index
        self.name = name
        self.raw = raw
        self.reason = reason
        super().__init__(f"Tool call {index} ({name or '?'}): {reason}: {raw!r}")


class ProviderConnectionError(ToolstreamError, ConnectionError):
    """The completion stream could not be opened."""
