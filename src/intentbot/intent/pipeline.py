"""
Message pipeline

Received → Segmented → Tokenized → Tagged → Lemmatized → Classified,
per sentence. Every sentence ends as either a ClassifiedSentence or a
SkippedSentence; one failing sentence never stops the others.
"""

from __future__ import annotations

from concurrent.futures import Executor
from dataclasses import dataclass
from typing import Union

import structlog

from intentbot.errors import ClassifierUnavailableError, PipelineError
from intentbot.intent.classifier import TrainedClassifier, classify
from intentbot.nlp.models import ModelHandle
from intentbot.nlp.normalizer import NormalizedSentence, Span, TextNormalizer

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ClassifiedSentence:
    """A sentence that made it through every stage."""

    index: int
    text: str
    category: str
    score: float
    sentence: NormalizedSentence

    def as_tuple(self) -> tuple[str, str, float]:
        return (self.text, self.category, self.score)


@dataclass(frozen=True)
class SkippedSentence:
    """A sentence dropped because one of its stages failed."""

    index: int
    text: str
    error: PipelineError

    @property
    def stage(self) -> str:
        return self.error.stage


SentenceOutcome = Union[ClassifiedSentence, SkippedSentence]


@dataclass(frozen=True)
class MessageResult:
    """Per-sentence outcomes for one message, in original sentence order."""

    text: str
    outcomes: tuple[SentenceOutcome, ...] = ()

    @property
    def classified(self) -> list[ClassifiedSentence]:
        return [o for o in self.outcomes if isinstance(o, ClassifiedSentence)]

    @property
    def skipped(self) -> list[SkippedSentence]:
        return [o for o in self.outcomes if isinstance(o, SkippedSentence)]

    @property
    def classifications(self) -> list[tuple[str, str, float]]:
        """(sentence text, category, score) for every classified sentence."""
        return [o.as_tuple() for o in self.classified]

    @property
    def categories(self) -> list[str]:
        return [o.category for o in self.classified]


def process_sentence(
    normalizer: TextNormalizer,
    classifier: TrainedClassifier,
    index: int,
    text: str,
    span: Span,
) -> SentenceOutcome:
    """Normalize and classify one sentence, recording any pipeline failure."""
    try:
        normalized = normalizer.normalize_sentence(text, span)
    except PipelineError as e:
        logger.warning("sentence_skipped", index=index, stage=e.stage, error=str(e))
        return SkippedSentence(index=index, text=text, error=e)

    result = classify(classifier, normalized.lemmas)
    logger.debug(
        "sentence_classified",
        index=index,
        category=result.label,
        score=round(result.score, 4),
    )
    return ClassifiedSentence(
        index=index,
        text=text,
        category=result.label,
        score=result.score,
        sentence=normalized,
    )


def classify_message(
    handle: ModelHandle,
    classifier: TrainedClassifier | None,
    text: str,
    executor: Executor | None = None,
) -> MessageResult:
    """
    Classify every sentence of a message.

    Args:
        handle: Loaded pipeline models
        classifier: Trained category classifier
        text: Raw message text
        executor: Optional pool for classifying sentences concurrently;
            results keep the original sentence order either way

    Raises:
        ClassifierUnavailableError: no classifier was supplied
    """
    if classifier is None:
        raise ClassifierUnavailableError("No trained classifier; train one before classifying")

    normalizer = TextNormalizer(handle)
    try:
        spans = normalizer.sentence_spans(text)
    except PipelineError as e:
        # Segmentation failed; the whole message is the one skipped unit
        logger.warning("message_skipped", stage=e.stage, error=str(e))
        return MessageResult(text=text, outcomes=(SkippedSentence(0, text.strip(), e),))

    jobs = [(index, text[start:end], (start, end)) for index, (start, end) in enumerate(spans)]

    if executor is None or len(jobs) < 2:
        outcomes = [process_sentence(normalizer, classifier, *job) for job in jobs]
    else:
        # Executor.map yields results in submission order
        outcomes = list(
            executor.map(lambda job: process_sentence(normalizer, classifier, *job), jobs)
        )

    return MessageResult(text=text, outcomes=tuple(outcomes))
