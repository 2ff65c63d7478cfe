"""
Configuration: model presets plus planning and execution limits.

Loading priority:
  1. Project dir .autoswe.yml
  2. Git root .autoswe.yml
  3. Global ~/.autoswe/config.yml

Environment (.env files are loaded first, never overriding existing vars):
  AUTOSWE_MODEL, AUTOSWE_VERBOSE, AUTOSWE_LLM_TIMEOUT
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from dotenv import load_dotenv

from .logger import get_logger

_log = get_logger(__name__)

CONFIG_DIR = Path.home() / ".autoswe"
CONFIG_FILE = CONFIG_DIR / "config.yml"
PROJECT_CONFIG_NAME = ".autoswe.yml"

DEFAULT_COMPLETION_PHRASES = [
    "task completed",
    "task complete",
    "successfully completed",
    "done",
]

# Providers that authenticate without an API key (local servers, AWS credential chain).
KEYLESS_PROVIDERS = {"local", "bedrock"}


@dataclass
class ModelPreset:
    name: str
    provider: str
    model: str
    api_base: Optional[str] = None
    api_key: Optional[str] = None
    api_key_env: Optional[str] = None
    region: Optional[str] = None
    temperature: float = 0.0
    max_tokens: int = 8192
    description: str = ""

    def resolve_api_key(self) -> Optional[str]:
        if self.api_key:
            return self.api_key
        if self.api_key_env:
            return os.environ.get(self.api_key_env)
        env_map = {
            "openai": "OPENAI_API_KEY", "anthropic": "ANTHROPIC_API_KEY",
            "deepseek": "DEEPSEEK_API_KEY", "gemini": "GEMINI_API_KEY",
        }
        env_var = env_map.get(self.provider)
        return os.environ.get(env_var) if env_var else None

    def resolve_region(self) -> Optional[str]:
        if self.provider != "bedrock":
            return self.region
        return self.region or os.environ.get("AWS_REGION") or "us-west-2"

    @property
    def needs_api_key(self) -> bool:
        return self.provider not in KEYLESS_PROVIDERS

    def get_llm_kwargs(self) -> dict:
        """Return kwargs for the LLMAdapter constructor, credentials resolved here."""
        return {
            "model": self.model,
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
            "api_base": self.api_base,
            "api_key": self.resolve_api_key(),
            "region": self.resolve_region(),
        }


@dataclass
class Config:
    active_model: str = "anthropic"
    planner_model: Optional[str] = None
    executor_model: Optional[str] = None
    models: Dict[str, ModelPreset] = field(default_factory=dict)
    planning_rounds: int = 5
    execution_rounds: int = 15
    planning_output_chars: int = 5000
    execution_output_chars: int = 10000
    max_plan_items: int = 0  # 0 = no ceiling on numbered plan items
    completion_phrases: List[str] = field(
        default_factory=lambda: list(DEFAULT_COMPLETION_PHRASES)
    )
    command_timeout: int = 120
    llm_timeout: int = 600
    blocked_commands: List[str] = field(
        default_factory=lambda: [
            "rm -rf /", "rm -rf /*", "mkfs", "dd if=", "> /dev/sda",
            ":(){:|:&};:",  # fork bomb
        ]
    )
    verbose: bool = False
    log_file: Optional[str] = None
    project_root: Optional[str] = None
    _config_source: str = ""

    @classmethod
    def load(cls, project_dir: str = ".") -> "Config":
        config = cls()
        project_path = Path(project_dir).expanduser().resolve()

        for env_path in [CONFIG_DIR / ".env", project_path / ".env"]:
            if env_path.exists():
                load_dotenv(env_path, override=False)

        git_root = cls._find_git_root(project_path)
        config_loaded = False
        for candidate in [
            project_path / PROJECT_CONFIG_NAME,
            (git_root / PROJECT_CONFIG_NAME) if git_root and git_root != project_path else None,
            CONFIG_FILE,
        ]:
            if candidate and candidate.exists():
                config._load_yaml(candidate)
                config._config_source = str(candidate)
                config_loaded = True
                break

        if not config_loaded:
            config._add_default_presets()
            config._config_source = "(built-in defaults)"

        config._apply_env()
        config.project_root = str(project_path)
        return config

    @classmethod
    def get_default_presets(cls) -> Dict[str, ModelPreset]:
        return {
            "anthropic": ModelPreset(
                name="anthropic", provider="anthropic",
                model="anthropic/claude-3-5-sonnet-20241022",
                api_key_env="ANTHROPIC_API_KEY",
                description="Claude 3.5 Sonnet via the Anthropic API",
            ),
            "bedrock": ModelPreset(
                name="bedrock", provider="bedrock",
                model="bedrock/anthropic.claude-3-opus-20240229-v1:0",
                description="Claude 3 Opus via AWS Bedrock (AWS credential chain)",
                max_tokens=4096,
            ),
            "openai": ModelPreset(
                name="openai", provider="openai",
                model="openai/gpt-4o",
                api_key_env="OPENAI_API_KEY",
                description="GPT-4o via the OpenAI API",
                max_tokens=4096,
            ),
            "local": ModelPreset(
                name="local", provider="local", model="openai/model",
                api_base="http://localhost:8080/v1", api_key="not-needed",
                description="Local model (vLLM / llama.cpp on :8080)",
                max_tokens=4096,
            ),
        }

    def _add_default_presets(self):
        self.models = self.get_default_presets()
        self.active_model = "anthropic"

    def _load_yaml(self, filepath: Path):
        try:
            with open(filepath) as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            _log.warning("Cannot read %s, using defaults: %s", filepath, e)
            self._add_default_presets()
            return

        self.active_model = data.get("active-model", "anthropic")
        self.planner_model = data.get("planner-model")
        self.executor_model = data.get("executor-model")
        self.planning_rounds = self._coerce_positive_int(
            data.get("planning-rounds", 5), default=5, min_value=1, max_value=50
        )
        self.execution_rounds = self._coerce_positive_int(
            data.get("execution-rounds", 15), default=15, min_value=1, max_value=200
        )
        self.planning_output_chars = self._coerce_positive_int(
            data.get("planning-output-chars", 5000), default=5000, min_value=500, max_value=200000
        )
        self.execution_output_chars = self._coerce_positive_int(
            data.get("execution-output-chars", 10000), default=10000, min_value=500, max_value=200000
        )
        self.max_plan_items = self._coerce_positive_int(
            data.get("max-plan-items", 0), default=0, min_value=0, max_value=1000
        )
        self.command_timeout = self._coerce_positive_int(
            data.get("command-timeout", 120), default=120, min_value=1, max_value=3600
        )
        self.llm_timeout = self._coerce_positive_int(
            data.get("llm-timeout", 600), default=600, min_value=5, max_value=7200
        )
        self.verbose = self._coerce_bool(data.get("verbose", False), default=False)
        self.log_file = data.get("log-file")

        if "completion-phrases" in data:
            raw = data.get("completion-phrases") or []
            if isinstance(raw, list):
                phrases = [str(p).strip().lower() for p in raw if str(p).strip()]
                self.completion_phrases = phrases or list(DEFAULT_COMPLETION_PHRASES)
        if "blocked-commands" in data:
            self.blocked_commands = [str(c) for c in (data["blocked-commands"] or [])]

        self.models = {}
        for name, m in (data.get("models") or {}).items():
            m = m or {}
            self.models[name] = ModelPreset(
                name=name, provider=m.get("provider", "openai"),
                model=m.get("model", "openai/gpt-4o-mini"),
                api_base=m.get("api-base"), api_key=m.get("api-key"),
                api_key_env=m.get("api-key-env"),
                region=m.get("region"),
                temperature=m.get("temperature", 0.0),
                max_tokens=m.get("max-tokens", 8192),
                description=m.get("description", ""),
            )
        if not self.models:
            self.models = self.get_default_presets()

    def _apply_env(self):
        env_map = {
            "AUTOSWE_MODEL": ("active_model", str),
            "AUTOSWE_VERBOSE": ("verbose", lambda v: v.lower() in ("true", "1")),
            "AUTOSWE_LLM_TIMEOUT": (
                "llm_timeout",
                lambda v: self._coerce_positive_int(v, default=self.llm_timeout, min_value=5, max_value=7200),
            ),
        }
        for env_var, (attr, conv) in env_map.items():
            val = os.environ.get(env_var)
            if val:
                try:
                    setattr(self, attr, conv(val))
                except (ValueError, TypeError):
                    _log.warning("Ignoring invalid %s=%r", env_var, val)

    # ── Preset lookup ──

    def get_active_preset(self) -> ModelPreset:
        if self.active_model in self.models:
            return self.models[self.active_model]
        fallback = next(iter(self.models.values()), None)
        if fallback is None:
            raise KeyError("No model presets configured")
        _log.warning("Unknown model '%s', falling back to '%s'", self.active_model, fallback.name)
        return fallback

    def _preset_or_active(self, name: Optional[str]) -> ModelPreset:
        if name and name in self.models:
            return self.models[name]
        return self.get_active_preset()

    def get_planner_preset(self) -> ModelPreset:
        return self._preset_or_active(self.planner_model)

    def get_executor_preset(self) -> ModelPreset:
        return self._preset_or_active(self.executor_model)

    def missing_credentials(self) -> List[str]:
        """Names of presets in use that need an API key but have none."""
        missing = []
        for preset in {id(p): p for p in (self.get_planner_preset(), self.get_executor_preset())}.values():
            if preset.needs_api_key and not preset.resolve_api_key():
                missing.append(preset.name)
        return missing

    def summary(self) -> dict:
        return {
            "source": self._config_source,
            "project_root": self.project_root,
            "active_model": self.active_model,
            "planner_model": self.get_planner_preset().name,
            "executor_model": self.get_executor_preset().name,
            "planning_rounds": self.planning_rounds,
            "execution_rounds": self.execution_rounds,
            "planning_output_chars": self.planning_output_chars,
            "execution_output_chars": self.execution_output_chars,
            "max_plan_items": self.max_plan_items or "unlimited",
            "command_timeout": self.command_timeout,
            "llm_timeout": self.llm_timeout,
            "completion_phrases": ", ".join(self.completion_phrases),
            "verbose": self.verbose,
        }

    @staticmethod
    def _coerce_bool(value: Any, default: bool) -> bool:
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            text = value.strip().lower()
            if text in ("1", "true", "yes", "on"):
                return True
            if text in ("0", "false", "no", "off"):
                return False
        if isinstance(value, (int, float)):
            return bool(value)
        return default

    @staticmethod
    def _coerce_positive_int(value, default: int, min_value: int = 1, max_value: int = 100000) -> int:
        try:
            parsed = int(value)
        except (TypeError, ValueError):
            return default
        if parsed < min_value:
            return min_value
        if parsed > max_value:
            return max_value
        return parsed

    @staticmethod
    def _find_git_root(path: Path) -> Optional[Path]:
        current = path
        while current != current.parent:
            if (current / ".git").exists():
                return current
            current = current.parent
        return None
