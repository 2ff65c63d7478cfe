"""Shared fixtures for autoswe tests."""

import os
from unittest.mock import MagicMock

import pytest
import yaml

from autoswe.rendering import RunRenderer


@pytest.fixture
def tmp_dir(tmp_path):
    """Provide a temporary directory and cd into it."""
    orig = os.getcwd()
    os.chdir(tmp_path)
    yield tmp_path
    os.chdir(orig)


@pytest.fixture
def workspace(tmp_path):
    """A small project tree for the agents to explore."""
    (tmp_path / "app.py").write_text("print('hello')\n", encoding="utf-8")
    (tmp_path / "README.md").write_text("# demo\n", encoding="utf-8")
    return tmp_path


@pytest.fixture
def sample_config_data():
    """Minimal .autoswe.yml data dict."""
    return {
        "active-model": "local",
        "planning-rounds": 3,
        "execution-rounds": 8,
        "planning-output-chars": 2000,
        "execution-output-chars": 4000,
        "max-plan-items": 20,
        "command-timeout": 30,
        "llm-timeout": 90,
        "verbose": False,
        "completion-phrases": ["Task Completed", "all done"],
        "blocked-commands": ["rm -rf /"],
        "models": {
            "local": {
                "provider": "local",
                "model": "openai/model",
                "description": "Local test model",
                "temperature": 0.0,
                "max-tokens": 4096,
                "api-base": "http://localhost:8080/v1",
                "api-key": "not-needed",
            },
            "cloud": {
                "provider": "openai",
                "model": "openai/gpt-4o",
                "api-key-env": "AUTOSWE_TEST_KEY",
            },
        },
    }


@pytest.fixture
def config_yaml_file(tmp_dir, sample_config_data):
    """Write a config YAML to tmp_dir and return its Path."""
    path = tmp_dir / ".autoswe.yml"
    with open(path, "w") as f:
        yaml.dump(sample_config_data, f, default_flow_style=False)
    return path


@pytest.fixture
def mock_console():
    """A mock Rich Console that silently accepts all print calls."""
    c = MagicMock()
    c.print = MagicMock()
    return c


@pytest.fixture
def renderer(mock_console):
    return RunRenderer(mock_console)


@pytest.fixture
def isolated_env(monkeypatch, tmp_path):
    """Keep ~/.autoswe and AUTOSWE_* variables from leaking into config tests."""
    monkeypatch.setattr("autoswe.config.CONFIG_DIR", tmp_path / "home-config")
    monkeypatch.setattr("autoswe.config.CONFIG_FILE", tmp_path / "home-config" / "config.yml")
    for var in ("AUTOSWE_MODEL", "AUTOSWE_VERBOSE", "AUTOSWE_LLM_TIMEOUT", "AUTOSWE_TEST_KEY"):
        monkeypatch.delenv(var, raising=False)
    yield
    # load_dotenv writes straight into os.environ
    os.environ.pop("AUTOSWE_TEST_KEY", None)
