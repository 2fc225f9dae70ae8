"""OpenAI-compatible provider implementation."""

from __future__ import annotations

import asyncio
import logging
import threading
import traceback
from typing import Any, AsyncIterator, Callable

from openai import OpenAI

from toolstream.config import ToolstreamConfig, resolve_api_key
from toolstream.errors import ProviderConnectionError, ToolstreamError
from toolstream.tool_calls import ToolCall, ToolCallAccumulator

from .base import Provider, ProviderResponse, StreamChunk, TokenUsage

logger = logging.getLogger(__name__)

_DONE = object()


class OpenAICompatibleProvider(Provider):
    """Provider for OpenAI-compatible APIs.

    Supports the OpenAI API and compatible services (Ollama, vLLM, Hugging
    Face, etc.). Handles reasoning/thinking content for models that send it.

    Tool-call argument fragments are tracked per call while streaming, so
    ``complete`` can hand each call to ``on_tool_call`` the moment its
    arguments form a complete JSON object rather than after the whole
    response has arrived.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        model: str,
        on_connect: Callable | None = None,
        strict_arguments: bool = False,
        stop_after_complete: bool = True,
    ):
        """Initialize OpenAI-compatible provider.

        Args:
            base_url: Base URL for the API endpoint
            api_key: API key for authentication
            model: Model identifier
            on_connect: Optional callback called when the client first connects
            strict_arguments: If True, raise ToolArgumentsError for tool calls
                whose arguments never complete or fail to parse, instead of
                substituting empty arguments.
            stop_after_complete: Stop tracking a tool call's arguments once it
                has been handed to ``on_tool_call``.
        """
        self.base_url = base_url
        self.api_key = api_key
        self.model = model
        self.on_connect = on_connect
        self.strict_arguments = strict_arguments
        self.stop_after_complete = stop_after_complete
        self._client: OpenAI | None = None

    def _get_client(self):
        """Lazy client initialization."""
        if self._client is None:
            self._client = OpenAI(base_url=self.base_url, api_key=self.api_key)
            if self.on_connect:
                self.on_connect("...")
        return self._client

    async def stream_completion(
        self,
        messages: list[dict[str, Any]],
        tools: list[dict[str, Any]] | None = None,
        on_chunk: Callable[[str], None] | None = None,
        on_thinking_chunk: Callable[[str], None] | None = None,
    ) -> AsyncIterator[StreamChunk]:
        """Stream completion chunks from an OpenAI-compatible API.

        The SDK stream is blocking, so it is consumed in an executor thread and
        handed back to the event loop through a queue.
        """
        client = self._get_client()
        loop = asyncio.get_running_loop()
        queue: asyncio.Queue = asyncio.Queue()
        cancelled = threading.Event()

        create_kwargs: dict = dict(
            model=self.model,
            messages=messages,
            stream=True,
            stream_options={"include_usage": True},
        )
        if tools:
            create_kwargs["tools"] = tools
            create_kwargs["tool_choice"] = "auto"

        def put(item) -> None:
            loop.call_soon_threadsafe(queue.put_nowait, item)

        def sync_stream():
            """Synchronously stream from OpenAI-compatible API."""
            try:
                try:
                    stream = client.chat.completions.create(**create_kwargs)
                except Exception:
                    error = f"Connection error: {traceback.format_exc()}"
                    logger.error("%s", error)
                    put(ProviderConnectionError(error))
                    return

                for chunk in stream:
                    if cancelled.is_set():
                        break
                    put(chunk)
            except Exception as e:
                put(e)
            finally:
                put(_DONE)

        logger.info("Sending %d messages to %s", len(messages), self.model)
        loop.run_in_executor(None, sync_stream)

        try:
            while True:
                item = await queue.get()
                if item is _DONE:
                    break
                if isinstance(item, Exception):
                    raise item
                yield self._to_stream_chunk(item, on_chunk, on_thinking_chunk)
        finally:
            cancelled.set()

    @staticmethod
    def _to_stream_chunk(
        chunk: Any,
        on_chunk: Callable[[str], None] | None,
        on_thinking_chunk: Callable[[str], None] | None,
    ) -> StreamChunk:
        stream_chunk = StreamChunk()

        # Usage arrives on the final chunk
        if getattr(chunk, "usage", None):
            stream_chunk.usage = TokenUsage(
                input_tokens=chunk.usage.prompt_tokens or 0,
                output_tokens=chunk.usage.completion_tokens or 0,
                total_tokens=chunk.usage.total_tokens or 0,
            )

        if not chunk.choices:
            return stream_chunk

        delta = chunk.choices[0].delta

        # Reasoning/thinking content (o1, o3, deepseek-style models)
        reasoning = getattr(delta, "reasoning_content", None)
        if reasoning:
            stream_chunk.reasoning = reasoning
            if on_thinking_chunk:
                on_thinking_chunk(reasoning)

        if delta.content:
            stream_chunk.content = delta.content
            if on_chunk:
                on_chunk(delta.content)

        if getattr(delta, "tool_calls", None):
            stream_chunk.tool_calls = [
                {
                    "index": tc.index,
                    "id": tc.id or "",
                    "function": {
                        "name": (tc.function.name or "") if tc.function else "",
                        "arguments": (tc.function.arguments or "")
                        if tc.function
                        else "",
                    },
                }
                for tc in delta.tool_calls
            ]

        return stream_chunk

    async def complete(
        self,
        messages: list[dict[str, Any]],
        tools: list[dict[str, Any]] | None = None,
        on_chunk: Callable[[str], None] | None = None,
        on_tool_call: Callable[[ToolCall], None] | None = None,
    ) -> ProviderResponse:
        """Send messages and aggregate the streamed response.

        Raises:
            ProviderConnectionError: The stream could not be opened.
            ToolArgumentsError: ``strict_arguments`` is set and a tool call's
                arguments were incomplete or invalid.
        """
        text = ""
        thinking = ""
        usage: TokenUsage | None = None
        chunk_count = 0
        accumulator = ToolCallAccumulator(
            on_complete=on_tool_call,
            stop_after_complete=self.stop_after_complete,
        )

        try:
            async for chunk in self.stream_completion(messages, tools, on_chunk=on_chunk):
                if chunk.usage:
                    usage = chunk.usage
                if chunk.content:
                    chunk_count += 1
                    text += chunk.content
                if chunk.reasoning:
                    thinking += chunk.reasoning
                if chunk.tool_calls:
                    accumulator.feed(chunk.tool_calls)
        except (asyncio.CancelledError, ToolstreamError):
            raise
        except Exception:
            error_msg = f"Error communicating with model: {traceback.format_exc()}"
            logger.error("%s", error_msg)
            return ProviderResponse(text=text, error=error_msg)

        tool_calls = accumulator.finalize(strict=self.strict_arguments)
        if tool_calls:
            logger.info(
                "Received %d tool call(s), %d completed while streaming",
                len(tool_calls),
                len(accumulator.ready),
            )

        logger.info(
            "Response complete (%d chars in %d chunks, %d in/%d out tokens)",
            len(text),
            chunk_count,
            usage.input_tokens if usage else 0,
            usage.output_tokens if usage else 0,
        )
        if thinking:
            logger.debug("Received thinking content (%d chars)", len(thinking))

        return ProviderResponse(
            text=text,
            tool_calls=tool_calls,
            thinking=thinking or None,
            usage=usage,
        )

    async def check_connection(self) -> bool:
        """Check connectivity by attempting a minimal request."""
        try:
            response = await self.complete([{"role": "user", "content": "Hi"}])
        except Exception:
            return False
        return response.error is None


def create_provider(config: ToolstreamConfig) -> OpenAICompatibleProvider:
    """Build a provider from user configuration."""
    if not config.model:
        raise ToolstreamError("No model configured")

    return OpenAICompatibleProvider(
        base_url=config.base_url or "https://api.openai.com/v1",
        api_key=resolve_api_key(config),
        model=config.model,
        strict_arguments=config.strict_arguments,
        stop_after_complete=config.stop_after_complete,
    )
