"""Streaming completeness check for JSON objects."""

from __future__ import annotations


class JsonChecker:
    """Tracks whether streamed text forms a complete top-level JSON object.

    Fragments are scanned once, character by character, tracking string
    literals, escape sequences and brace depth. Everything before the first
    ``{`` is discarded, so leading whitespace or prose some models emit ahead
    of a tool-call payload is tolerated.

    This is not a JSON validator: only braces, quotes and backslashes are
    classified. Balanced-but-malformed text is reported complete, and text
    that never balances simply stays incomplete.
    """

    def __init__(self) -> None:
        self._buffer: list[str] = []
        self._depth = 0
        self._in_string = False
        self._escape_next = False
        self._seen_left_brace = False

    @property
    def depth(self) -> int:
        """Number of currently unmatched ``{`` outside string literals."""
        return self._depth

    @property
    def in_string(self) -> bool:
        return self._in_string

    @property
    def escape_pending(self) -> bool:
        return self._escape_next

    @property
    def brace_seen(self) -> bool:
        return self._seen_left_brace

    def append(self, fragment: str) -> None:
        """Consume *fragment* and update the tracking state."""
        for ch in fragment:
            # Discard everything before the first '{'
            if not self._seen_left_brace:
                if ch == "{":
                    self._seen_left_brace = True
                    self._depth = 1
                    self._buffer.append(ch)
                continue

            self._buffer.append(ch)

            if self._escape_next:
                self._escape_next = False
                continue

            if ch == "\\":
                # A backslash only escapes inside a string
                if self._in_string:
                    self._escape_next = True
            elif ch == '"':
                self._in_string = not self._in_string
            elif self._in_string:
                continue
            elif ch == "{":
                self._depth += 1
            elif ch == "}" and self._depth > 0:
                self._depth -= 1

    def buffer(self) -> str:
        """Return the text seen since (and including) the first ``{``."""
        return "".join(self._buffer)

    def is_complete(self) -> bool:
        """True if a ``{`` has been seen and every brace is currently matched."""
        return self._seen_left_brace and self._depth == 0

    def reset(self) -> None:
        self._buffer = []
        self._depth = 0
        self._in_string = False
        self._escape_next = False
        self._seen_left_brace = False

    def __len__(self) -> int:
        return len(self._buffer)

    def __repr__(self) -> str:
        return (
            f"JsonChecker(depth={self._depth}, in_string={self._in_string}, "
            f"escape_pending={self._escape_next}, complete={self.is_complete()}, "
            f"buffered={len(self)})"
        )
