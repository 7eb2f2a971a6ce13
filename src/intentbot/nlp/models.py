"""
Model Store

Loads the four pretrained pipeline artifacts (sentence, token, pos, lemma)
once at startup and holds them in an immutable ModelHandle that is passed
explicitly to everything that needs it.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any

import joblib
import structlog

from intentbot.config import ModelPathsConfig
from intentbot.errors import ModelLoadError

logger = structlog.get_logger(__name__)


class Stage(str, Enum):
    """Pipeline stages backed by a pretrained model, in pipeline order."""

    SENTENCE = "sentence"
    TOKEN = "token"
    POS = "pos"
    LEMMA = "lemma"


# Method each stage's model must expose
STAGE_METHODS: dict[Stage, str] = {
    Stage.SENTENCE: "span_tokenize",
    Stage.TOKEN: "tokenize",
    Stage.POS: "tag",
    Stage.LEMMA: "lemmatize",
}

PROBE_TEXT = "Hello there. How much does it cost?"


@dataclass(frozen=True)
class ModelPaths:
    """File locations of the four artifacts."""

    sentence: Path
    token: Path
    pos: Path
    lemma: Path

    @classmethod
    def from_config(cls, config: ModelPathsConfig) -> "ModelPaths":
        return cls(
            sentence=Path(config.sentence),
            token=Path(config.token),
            pos=Path(config.pos),
            lemma=Path(config.lemma),
        )

    @classmethod
    def in_directory(cls, directory: Path | str) -> "ModelPaths":
        """Default artifact file names inside one directory."""
        directory = Path(directory)
        return cls(
            sentence=directory / "en-sent.joblib",
            token=directory / "en-token.joblib",
            pos=directory / "en-pos.joblib",
            lemma=directory / "en-lemmatizer.joblib",
        )

    def for_stage(self, stage: Stage) -> Path:
        return getattr(self, stage.value)


@dataclass(frozen=True)
class ModelHandle:
    """
    The loaded pipeline models.

    Read-only after construction; safe to share between threads as long
    as the models themselves are only read, which all pipeline stages do.
    """

    sentence: Any
    token: Any
    pos: Any
    lemma: Any

    def __post_init__(self) -> None:
        for stage in Stage:
            _check_interface(stage, getattr(self, stage.value), None)

    def for_stage(self, stage: Stage) -> Any:
        return getattr(self, stage.value)


def _check_interface(stage: Stage, model: Any, path: Path | None) -> None:
    if model is None:
        raise ModelLoadError(stage.value, path, "model is missing")
    method = STAGE_METHODS[stage]
    if not callable(getattr(model, method, None)):
        raise ModelLoadError(
            stage.value,
            path,
            f"{type(model).__name__} does not provide {method}()",
        )


def load_model(stage: Stage, path: Path | str) -> Any:
    """
    Load one artifact and check it fits its stage.

    Raises:
        ModelLoadError: missing file, unreadable artifact or wrong interface
    """
    path = Path(path)
    if not path.is_file():
        raise ModelLoadError(stage.value, path, "file not found")

    try:
        model = joblib.load(path)
    except Exception as e:
        raise ModelLoadError(stage.value, path, f"unreadable artifact ({e})") from e

    _check_interface(stage, model, path)
    logger.info("model_loaded", stage=stage.value, path=str(path), kind=type(model).__name__)
    return model


def warm_up(handle: ModelHandle, paths: ModelPaths | None = None) -> None:
    """
    Run a short probe through every stage.

    Catches artifacts that unpickle but cannot run, and forces any lazy
    library state to initialise before the handle is shared.
    """
    stage = Stage.SENTENCE
    try:
        spans = list(handle.sentence.span_tokenize(PROBE_TEXT))
        start, end = spans[0] if spans else (0, len(PROBE_TEXT))
        stage = Stage.TOKEN
        tokens = list(handle.token.tokenize(PROBE_TEXT[start:end]))
        stage = Stage.POS
        tags = [tag for _, tag in handle.pos.tag(tokens)]
        stage = Stage.LEMMA
        handle.lemma.lemmatize(tokens, tags)
    except Exception as e:
        path = paths.for_stage(stage) if paths else None
        raise ModelLoadError(stage.value, path, f"probe failed ({e})") from e


def load_models(paths: ModelPaths) -> ModelHandle:
    """
    Load all four artifacts.

    There is no partial mode: the first failing stage raises ModelLoadError
    and no handle is returned.
    """
    loaded = {stage.value: load_model(stage, paths.for_stage(stage)) for stage in Stage}
    handle = ModelHandle(**loaded)
    warm_up(handle, paths)
    logger.info("models_loaded", stages=[stage.value for stage in Stage])
    return handle


def initialize(model_paths: ModelPaths | ModelPathsConfig) -> ModelHandle:
    """Public entry point: load the pipeline models from config or explicit paths."""
    if isinstance(model_paths, ModelPathsConfig):
        model_paths = ModelPaths.from_config(model_paths)
    return load_models(model_paths)
