"""Configuration management for toolstream.

This module handles loading user configuration from ~/.config/toolstream/init.py
and provides a sandboxed execution environment for user settings.
"""

from __future__ import annotations

import logging
import os
import traceback
from pathlib import Path
from typing import Any, Optional

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class ToolstreamConfig:
    """Configuration container for toolstream settings.

    This class stores configuration values that can be set by the user's init.py file.
    All settings have sensible defaults.
    """

    def __init__(self):
        # Provider settings
        self.base_url: Optional[str] = None  # e.g., http://localhost:11434/v1
        self.model: Optional[str] = None  # gpt-4o-mini, qwen2.5-coder, etc
        self.api_key: Optional[str] = None  # Falls back to OPENAI_API_KEY

        # Tool-call argument handling
        self.strict_arguments: bool = False
        self.stop_after_complete: bool = True

        # Logging
        self.logging: bool = False
        self.log_file: str = "toolstream.log"

        # Custom settings (user can add any additional settings)
        self._custom: dict[str, Any] = {}

    def set(self, key: str, value: Any) -> None:
        """Set a custom configuration value."""
        self._custom[key] = value

    def get(self, key: str, default: Any = None) -> Any:
        """Get a custom configuration value."""
        return self._custom.get(key, default)


def get_config_path() -> Path:
    """Get the path to the user's config directory."""
    config_home = os.environ.get("XDG_CONFIG_HOME")
    if config_home:
        return Path(config_home) / "toolstream"
    return Path.home() / ".config" / "toolstream"


def get_init_script_path() -> Path:
    """Get the path to the user's init.py script."""
    return get_config_path() / "init.py"


def load_config() -> tuple[ToolstreamConfig, Optional[str]]:
    """Load configuration from ~/.config/toolstream/init.py.

    The init.py file is executed in a sandboxed environment where it can set
    configuration values on a 'config' object.

    Returns:
        A tuple of (config, error_message). If loading fails, error_message
        will contain details about the failure.
    """
    config = ToolstreamConfig()
    init_path = get_init_script_path()

    # If no init.py exists, return default config
    if not init_path.exists():
        return config, None

    sandbox = {
        "__builtins__": {
            "True": True,
            "False": False,
            "None": None,
            "str": str,
            "int": int,
            "float": float,
            "bool": bool,
            "list": list,
            "dict": dict,
            "tuple": tuple,
            "len": len,
            "print": print,
            # Explicitly deny dangerous operations
            "__import__": None,
            "open": None,
            "exec": None,
            "eval": None,
            "compile": None,
        },
        "config": config,
    }

    try:
        with open(init_path, "r") as f:
            code = f.read()

        exec(code, sandbox)
        return config, None

    except Exception:
        error_msg = f"Error loading config from {init_path}:\n{traceback.format_exc()}"
        return config, error_msg


def resolve_api_key(config: ToolstreamConfig) -> str:
    """Return the configured API key, or OPENAI_API_KEY from the environment."""
    if config.api_key:
        return config.api_key
    return os.environ.get("OPENAI_API_KEY", "")


def configure_logging(config: ToolstreamConfig) -> None:
    """Send toolstream log records to ``config.log_file`` when logging is enabled."""
    if not config.logging:
        return

    logging.basicConfig(
        level=logging.INFO,
        format=LOG_FORMAT,
        filename=config.log_file,
        filemode="a",  # append mode
    )
    logging.getLogger("toolstream.tool_calls").setLevel(logging.DEBUG)
