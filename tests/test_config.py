"""Tests for configuration loading and sandboxing."""

import logging

import pytest
from toolstream.config import (
    ToolstreamConfig,
    configure_logging,
    get_config_path,
    load_config,
    resolve_api_key,
)


class TestToolstreamConfig:
    def test_defaults(self):
        c = ToolstreamConfig()
        assert c.base_url is None
        assert c.model is None
        assert c.strict_arguments is False
        assert c.stop_after_complete is True
        assert c.logging is False

    def test_custom_settings(self):
        c = ToolstreamConfig()
        c.set("my_key", "my_value")
        assert c.get("my_key") == "my_value"
        assert c.get("missing", "default") == "default"


class TestConfigPath:
    def test_xdg_config_home(self, monkeypatch, tmp_path):
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
        assert get_config_path() == tmp_path / "toolstream"

    def test_default_path(self, monkeypatch):
        monkeypatch.delenv("XDG_CONFIG_HOME", raising=False)
        assert get_config_path().parts[-2:] == (".config", "toolstream")


class TestLoadConfig:
    def test_no_config_file(self, monkeypatch, tmp_path):
        """When no init.py exists, should return defaults with no error."""
        monkeypatch.setattr("toolstream.config.get_init_script_path", lambda: tmp_path / "init.py")
        config, error = load_config()
        assert error is None
        assert config.model is None

    def test_valid_config(self, init_file):
        init_file.write_text(
            'config.base_url = "http://localhost:11434/v1"\n'
            'config.model = "qwen2.5-coder"\n'
            "config.strict_arguments = True\n"
        )
        config, error = load_config()
        assert error is None
        assert config.base_url == "http://localhost:11434/v1"
        assert config.model == "qwen2.5-coder"
        assert config.strict_arguments is True

    @pytest.mark.parametrize(
        "code",
        ["import os\n", "f = open('/etc/passwd')\n", "eval('1+1')\n"],
    )
    def test_sandbox_blocks_dangerous_calls(self, init_file, code):
        init_file.write_text(code)
        config, error = load_config()
        assert error is not None
        assert "Error" in error

    def test_sandbox_allows_basic_types(self, init_file):
        init_file.write_text(
            "x = str(42)\n"
            "config.set('x', x)\n"
            "config.set('y', [int('1'), 2])\n"
        )
        config, error = load_config()
        assert error is None
        assert config.get("x") == "42"
        assert config.get("y") == [1, 2]

    def test_syntax_error_in_config(self, init_file):
        init_file.write_text("def f(:\n")
        config, error = load_config()
        assert error is not None
        assert "SyntaxError" in error


class TestResolveApiKey:
    def test_configured_key_wins(self, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "from-env")
        c = ToolstreamConfig()
        c.api_key = "from-config"
        assert resolve_api_key(c) == "from-config"

    def test_environment_fallback(self, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "from-env")
        assert resolve_api_key(ToolstreamConfig()) == "from-env"

    def test_missing_key(self, monkeypatch):
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)
        assert resolve_api_key(ToolstreamConfig()) == ""


class TestConfigureLogging:
    def test_disabled_by_default(self, monkeypatch):
        calls = []
        monkeypatch.setattr(logging, "basicConfig", lambda **kw: calls.append(kw))
        configure_logging(ToolstreamConfig())
        assert calls == []

    def test_enabled_writes_to_log_file(self, monkeypatch, tmp_path):
        calls = []
        monkeypatch.setattr(logging, "basicConfig", lambda **kw: calls.append(kw))
        c = ToolstreamConfig()
        c.logging = True
        c.log_file = str(tmp_path / "ts.log")
        configure_logging(c)
        assert calls[0]["filename"] == c.log_file
        assert calls[0]["filemode"] == "a"
        assert logging.getLogger("toolstream.tool_calls").level == logging.DEBUG
