"""
Error taxonomy.

Startup errors (model loading, corpus training) are fatal and propagate to
the caller. Pipeline errors belong to a single sentence and are recorded on
that sentence's result instead of being raised out of the message.
"""

from __future__ import annotations

from pathlib import Path
from typing import Sequence


class IntentBotError(Exception):
    """Base class for all intentbot errors."""


class ModelLoadError(IntentBotError):
    """A pretrained pipeline artifact could not be loaded."""

    def __init__(self, stage: str, path: Path | str | None, reason: str):
        self.stage = stage
        self.path = str(path) if path is not None else None
        self.reason = reason
        super().__init__(f"Failed to load {stage} model from {self.path}: {reason}")


class ModelBuildError(IntentBotError):
    """A pipeline artifact could not be built from NLTK resources."""


class CorpusFormatError(IntentBotError):
    """The training corpus is unreadable or contains a malformed line."""

    def __init__(self, path: Path | str, reason: str, line_no: int | None = None):
        self.path = str(path)
        self.line_no = line_no
        self.reason = reason
        where = f"{self.path}:{line_no}" if line_no is not None else self.path
        super().__init__(f"{where}: {reason}")


class EmptyCorpusError(IntentBotError):
    """The training corpus contained no labeled examples."""

    def __init__(self, path: Path | str):
        self.path = str(path)
        super().__init__(f"No labeled examples found in {self.path}")


class ClassifierUnavailableError(IntentBotError):
    """Classification was requested before a classifier was trained."""


class PipelineError(IntentBotError):
    """A per-sentence failure; the sentence is skipped, the message continues."""

    stage: str = "pipeline"


class AlignmentError(PipelineError):
    """Tokens and part-of-speech tags (or lemmas) differ in length."""

    stage = "lemma"

    def __init__(self, tokens: Sequence[str], tags: Sequence[str], what: str = "tags"):
        self.tokens = list(tokens)
        self.tags = list(tags)
        super().__init__(
            f"{len(self.tokens)} tokens but {len(self.tags)} {what}: {self.tokens!r}"
        )


class NormalizationError(PipelineError):
    """A pipeline model raised while processing one sentence."""

    def __init__(self, stage: str, error: Exception):
        self.stage = stage
        self.error = error
        super().__init__(f"{stage} stage failed: {error}")
