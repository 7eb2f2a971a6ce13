"""
intentbot Configuration System

Loads configuration from:
1. Default config (config/default.yaml in package)
2. User config (~/.intentbot/config/intentbot.yaml), merged over the default
3. Environment variables (INTENTBOT_ prefix), highest priority

Uses Pydantic for validation and type coercion.
"""

from __future__ import annotations

import os
from contextvars import ContextVar
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import (
    BaseSettings,
    InitSettingsSource,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

# Merged YAML values for the IntentBotConfig being built by load_config
_yaml_layer: ContextVar[dict[str, Any]] = ContextVar("intentbot_yaml_layer", default={})


def expand_path(path: str | Path | None) -> Path | None:
    """Expand ~ and environment variables in paths."""
    if path is None:
        return None
    expanded = os.path.expandvars(os.path.expanduser(str(path)))
    return Path(expanded)


# Default replies, keyed by category label
DEFAULT_ANSWERS: dict[str, str] = {
    "greeting": "Hello, how can I help you?",
    "product-inquiry": "Product is a Porsche 911 GT2 RS.",
    "price-inquiry": "Price is $300,000",
    "conversation-continue": "What else can I help you with?",
    "nice-ending": "Goodbye!",
    "cfa": "Chik-Fil-a",
}

# Categories that end the conversation; nice-ending is the goodbye category
# of the default answer table
DEFAULT_COMPLETION_CATEGORIES: tuple[str, ...] = ("conversation-complete", "nice-ending")


class AppMeta(BaseModel):
    """Core application metadata."""

    name: str = "intentbot"
    version: str = "0.1.0"


class LogConfig(BaseModel):
    """Logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    format: Literal["json", "console"] = "json"
    file: Path | None = None

    @field_validator("file", mode="before")
    @classmethod
    def expand_file_path(cls, v: Any) -> Path | None:
        return expand_path(v)


class ModelPathsConfig(BaseModel):
    """Locations of the four pretrained pipeline artifacts."""

    sentence: Path = Path("models/en-sent.joblib")
    token: Path = Path("models/en-token.joblib")
    pos: Path = Path("models/en-pos.joblib")
    lemma: Path = Path("models/en-lemmatizer.joblib")

    @field_validator("sentence", "token", "pos", "lemma", mode="before")
    @classmethod
    def expand_model_path(cls, v: Any) -> Path:
        return expand_path(v)


class TrainingConfig(BaseModel):
    """Category classifier training configuration."""

    corpus_path: Path = Path("data/response-categories.txt")
    iterations: int = Field(500, ge=1)
    cutoff: int = Field(0, ge=0)
    lowercase: bool = True
    use_normalizer: bool = True  # lemmatize corpus text with the loaded models
    cache_path: Path | None = None

    @field_validator("corpus_path", mode="before")
    @classmethod
    def expand_corpus_path(cls, v: Any) -> Path:
        return expand_path(v)

    @field_validator("cache_path", mode="before")
    @classmethod
    def expand_cache_path(cls, v: Any) -> Path | None:
        return expand_path(v)


class EngineConfig(BaseModel):
    """Per-message processing configuration."""

    parallel_sentences: bool = False
    max_workers: int = Field(4, ge=1)


class IntentBotConfig(BaseSettings):
    """
    Main intentbot configuration.

    Loads from YAML files and environment variables.
    Environment variables use INTENTBOT_ prefix and __ for nesting.
    Example: INTENTBOT_TRAINING__CUTOFF=2
    """

    model_config = SettingsConfigDict(
        env_prefix="INTENTBOT_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    app: AppMeta = Field(default_factory=AppMeta)
    log: LogConfig = Field(default_factory=LogConfig)
    models: ModelPathsConfig = Field(default_factory=ModelPathsConfig)
    training: TrainingConfig = Field(default_factory=TrainingConfig)
    engine: EngineConfig = Field(default_factory=EngineConfig)
    answers: dict[str, str] = Field(default_factory=lambda: dict(DEFAULT_ANSWERS))
    completion_categories: list[str] = Field(
        default_factory=lambda: list(DEFAULT_COMPLETION_CATEGORIES)
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # Earlier sources win: explicit kwargs, then env, then YAML
        yaml_settings = InitSettingsSource(settings_cls, init_kwargs=_yaml_layer.get())
        return (init_settings, env_settings, yaml_settings)


def find_config_files() -> list[Path]:
    """
    Configuration files to layer, lowest priority first.

    The shipped default (./config/default.yaml in development, else the
    package copy) is the base; ~/.intentbot/config/intentbot.yaml is
    merged on top of it.
    """
    files: list[Path] = []

    # Development: look for config relative to cwd
    dev_config = Path.cwd() / "config" / "default.yaml"
    # Package default: relative to this file
    package_config = Path(__file__).parent.parent.parent / "config" / "default.yaml"
    if dev_config.exists():
        files.append(dev_config)
    elif package_config.exists():
        files.append(package_config)

    user_config = Path.home() / ".intentbot" / "config" / "intentbot.yaml"
    if user_config.exists():
        files.append(user_config)

    return files


def load_yaml_config(path: Path | None) -> dict[str, Any]:
    """Load configuration from YAML file."""
    if path is None or not path.exists():
        return {}

    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f)

    return data if data else {}


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dictionaries, with override taking precedence."""
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def load_config(path: Path | None = None) -> IntentBotConfig:
    """
    Load complete configuration.

    Merges:
    1. Pydantic defaults
    2. YAML files (shipped default, then user config; or only ``path``)
    3. Environment variables (highest priority)
    """
    paths = [path] if path else find_config_files()
    yaml_config: dict[str, Any] = {}
    for config_path in paths:
        yaml_config = deep_merge(yaml_config, load_yaml_config(config_path))

    token = _yaml_layer.set(yaml_config)
    try:
        return IntentBotConfig()
    finally:
        _yaml_layer.reset(token)


# Global config instance (lazy-loaded)
_config: IntentBotConfig | None = None


def get_config() -> IntentBotConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reset_config() -> None:
    """Reset the global configuration (useful for testing)."""
    global _config
    _config = None
