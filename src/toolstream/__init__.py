from .config import ToolstreamConfig, load_config
from .errors import ProviderConnectionError, ToolArgumentsError, ToolstreamError
from .json_checker import JsonChecker
from .tool_calls import ToolCall, ToolCallAccumulator

__all__ = [
    "JsonChecker",
    "ToolCall",
    "ToolCallAccumulator",
    "ToolstreamConfig",
    "load_config",
    "ToolstreamError",
    "ToolArgumentsError",
    "ProviderConnectionError",
]
__version__ = "0.1.0"
