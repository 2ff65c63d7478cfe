"""Tests for configuration loading and preset resolution."""

import pytest
import yaml

from autoswe.config import DEFAULT_COMPLETION_PHRASES, Config, ModelPreset


@pytest.fixture(autouse=True)
def _isolate(isolated_env):
    pass


class TestConfigLoad:
    """Config.load() from YAML files."""

    def test_load_from_yaml(self, config_yaml_file, tmp_dir):
        config = Config.load(str(tmp_dir))
        assert config.active_model == "local"
        assert config.planning_rounds == 3
        assert config.execution_rounds == 8
        assert config.planning_output_chars == 2000
        assert config.execution_output_chars == 4000
        assert config.max_plan_items == 20
        assert config.command_timeout == 30
        assert config.llm_timeout == 90
        assert config.completion_phrases == ["task completed", "all done"]
        assert config.blocked_commands == ["rm -rf /"]
        assert config._config_source == str(config_yaml_file)

    def test_load_models(self, config_yaml_file, tmp_dir):
        config = Config.load(str(tmp_dir))
        preset = config.models["local"]
        assert isinstance(preset, ModelPreset)
        assert preset.provider == "local"
        assert preset.model == "openai/model"
        assert preset.api_base == "http://localhost:8080/v1"
        assert preset.max_tokens == 4096

    def test_defaults_when_no_config(self, tmp_dir):
        config = Config.load(str(tmp_dir))
        assert config._config_source == "(built-in defaults)"
        assert config.active_model == "anthropic"
        assert {"anthropic", "bedrock", "openai", "local"} <= set(config.models)
        assert config.planning_rounds == 5
        assert config.execution_rounds == 15
        assert config.planning_output_chars == 5000
        assert config.execution_output_chars == 10000
        assert config.max_plan_items == 0
        assert config.completion_phrases == DEFAULT_COMPLETION_PHRASES
        assert config.project_root == str(tmp_dir.resolve())

    def test_git_root_config(self, tmp_dir, sample_config_data):
        (tmp_dir / ".git").mkdir()
        sub = tmp_dir / "pkg" / "inner"
        sub.mkdir(parents=True)
        with open(tmp_dir / ".autoswe.yml", "w") as f:
            yaml.dump(sample_config_data, f)

        config = Config.load(str(sub))
        assert config.active_model == "local"
        assert config.project_root == str(sub.resolve())

    def test_values_are_clamped(self, tmp_dir, sample_config_data):
        sample_config_data.update({
            "planning-rounds": 0,
            "execution-rounds": "lots",
            "execution-output-chars": 10,
            "llm-timeout": 999999,
        })
        with open(tmp_dir / ".autoswe.yml", "w") as f:
            yaml.dump(sample_config_data, f)

        config = Config.load(str(tmp_dir))
        assert config.planning_rounds == 1
        assert config.execution_rounds == 15
        assert config.execution_output_chars == 500
        assert config.llm_timeout == 7200

    def test_broken_yaml_falls_back(self, tmp_dir):
        (tmp_dir / ".autoswe.yml").write_text("models: [unclosed", encoding="utf-8")
        config = Config.load(str(tmp_dir))
        assert "anthropic" in config.models


class TestEnvironment:
    def test_env_overrides(self, config_yaml_file, tmp_dir, monkeypatch):
        monkeypatch.setenv("AUTOSWE_MODEL", "cloud")
        monkeypatch.setenv("AUTOSWE_VERBOSE", "true")
        monkeypatch.setenv("AUTOSWE_LLM_TIMEOUT", "30")

        config = Config.load(str(tmp_dir))
        assert config.active_model == "cloud"
        assert config.verbose is True
        assert config.llm_timeout == 30

    def test_dotenv_supplies_missing_key(self, config_yaml_file, tmp_dir):
        (tmp_dir / ".env").write_text("AUTOSWE_TEST_KEY=from-dotenv\n", encoding="utf-8")
        config = Config.load(str(tmp_dir))
        assert config.models["cloud"].resolve_api_key() == "from-dotenv"

    def test_dotenv_does_not_override(self, config_yaml_file, tmp_dir, monkeypatch):
        monkeypatch.setenv("AUTOSWE_TEST_KEY", "from-shell")
        (tmp_dir / ".env").write_text("AUTOSWE_TEST_KEY=from-dotenv\n", encoding="utf-8")
        config = Config.load(str(tmp_dir))
        assert config.models["cloud"].resolve_api_key() == "from-shell"


class TestPresets:
    def test_phase_presets_default_to_active(self, config_yaml_file, tmp_dir):
        config = Config.load(str(tmp_dir))
        assert config.get_planner_preset().name == "local"
        assert config.get_executor_preset().name == "local"

    def test_phase_presets(self):
        config = Config(models=Config.get_default_presets(), active_model="anthropic",
                        planner_model="bedrock")
        assert config.get_planner_preset().name == "bedrock"
        assert config.get_executor_preset().name == "anthropic"

    def test_unknown_active_model_falls_back(self):
        config = Config(models=Config.get_default_presets(), active_model="missing")
        assert config.get_active_preset().name == "anthropic"

    def test_missing_credentials(self, monkeypatch):
        monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
        config = Config(models=Config.get_default_presets(), active_model="anthropic",
                        planner_model="bedrock")
        assert config.missing_credentials() == ["anthropic"]

        monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-test")
        assert config.missing_credentials() == []

    def test_bedrock_region(self, monkeypatch):
        monkeypatch.delenv("AWS_REGION", raising=False)
        preset = Config.get_default_presets()["bedrock"]
        assert preset.resolve_region() == "us-west-2"
        assert not preset.needs_api_key

        monkeypatch.setenv("AWS_REGION", "eu-central-1")
        assert preset.get_llm_kwargs()["region"] == "eu-central-1"

    def test_llm_kwargs_carry_explicit_credentials(self):
        preset = ModelPreset(name="x", provider="openai", model="openai/gpt-4o",
                             api_key="sk-explicit", api_base="https://proxy/v1")
        kwargs = preset.get_llm_kwargs()
        assert kwargs["api_key"] == "sk-explicit"
        assert kwargs["api_base"] == "https://proxy/v1"
        assert kwargs["region"] is None


def test_summary_lists_limits(config_yaml_file, tmp_dir):
    summary = Config.load(str(tmp_dir)).summary()
    assert summary["planning_rounds"] == 3
    assert summary["max_plan_items"] == 20
    assert summary["planner_model"] == "local"
