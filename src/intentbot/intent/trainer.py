"""
Category Trainer

Fits a maximum-entropy (logistic regression) document classifier over
bag-of-words features from a labeled corpus, and persists trained
classifiers with joblib.
"""

from __future__ import annotations

import warnings
from collections import Counter
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Sequence

import joblib
import numpy as np
import structlog
from sklearn.exceptions import ConvergenceWarning
from sklearn.feature_extraction.text import CountVectorizer
from sklearn.linear_model import LogisticRegression

from intentbot.config import TrainingConfig
from intentbot.errors import (
    ClassifierUnavailableError,
    CorpusFormatError,
    EmptyCorpusError,
    PipelineError,
)
from intentbot.intent.classifier import TrainedClassifier, analyze_document, bag_of_words
from intentbot.intent.corpus import LabeledExample, categories_in_order, read_corpus
from intentbot.nlp.models import ModelHandle
from intentbot.nlp.normalizer import TextNormalizer

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class TrainingParams:
    """Optimizer passes and feature cutoff. Defaults: 500 passes, no cutoff."""

    iterations: int = 500
    cutoff: int = 0
    lowercase: bool = True

    def __post_init__(self) -> None:
        if self.iterations < 1:
            raise ValueError("iterations must be at least 1")
        if self.cutoff < 0:
            raise ValueError("cutoff must not be negative")

    @classmethod
    def from_config(cls, config: TrainingConfig) -> "TrainingParams":
        return cls(
            iterations=config.iterations,
            cutoff=config.cutoff,
            lowercase=config.lowercase,
        )

    def settings(self, normalized: bool) -> dict[str, Any]:
        """Everything besides the corpus that determines the trained model."""
        return {
            "iterations": self.iterations,
            "cutoff": self.cutoff,
            "lowercase": self.lowercase,
            "normalized": normalized,
        }


def example_features(
    example: LabeledExample,
    normalizer: TextNormalizer | None,
    lowercase: bool,
    source: Path | str = "<corpus>",
) -> list[str]:
    """Bag-of-words tokens for one example; lemmas when a normalizer is given."""
    if normalizer is None:
        tokens = example.text.split()
    else:
        try:
            tokens = normalizer.lemmas_of(example.text)
        except PipelineError as e:
            raise CorpusFormatError(source, f"cannot normalize example ({e})", example.line_no) from e
    return bag_of_words(tokens, lowercase)


def fit(
    examples: Sequence[LabeledExample],
    params: TrainingParams | None = None,
    normalizer: TextNormalizer | None = None,
    source: Path | str = "<corpus>",
) -> TrainedClassifier:
    """
    Train a classifier from in-memory examples.

    Raises:
        EmptyCorpusError: no examples
        CorpusFormatError: an example could not be normalized
    """
    params = params or TrainingParams()
    if not examples:
        raise EmptyCorpusError(source)

    labels = categories_in_order(list(examples))
    documents = [example_features(ex, normalizer, params.lowercase, source) for ex in examples]
    targets = [ex.category for ex in examples]

    counts = Counter(token for document in documents for token in document)
    vocabulary = sorted(token for token, n in counts.items() if n >= params.cutoff)

    label_counts = Counter(targets)
    priors = np.array([label_counts[label] for label in labels], dtype=float) / len(targets)
    trained_with = params.settings(normalized=normalizer is not None)

    if len(labels) < 2 or not vocabulary:
        logger.warning(
            "prior_only_classifier",
            labels=list(labels),
            vocabulary=len(vocabulary),
            cutoff=params.cutoff,
        )
        return TrainedClassifier(
            labels=labels,
            priors=priors,
            lowercase=params.lowercase,
            trained_with=trained_with,
        )

    vectorizer = CountVectorizer(analyzer=analyze_document, vocabulary=vocabulary, lowercase=False)
    features = vectorizer.fit_transform(documents)

    estimator = LogisticRegression(max_iter=params.iterations, random_state=0)
    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always", ConvergenceWarning)
        estimator.fit(features, targets)
    if any(issubclass(w.category, ConvergenceWarning) for w in caught):
        logger.warning("training_not_converged", iterations=params.iterations)

    classes = [str(c) for c in estimator.classes_]
    classifier = TrainedClassifier(
        labels=labels,
        priors=priors,
        vectorizer=vectorizer,
        estimator=estimator,
        column_order=tuple(classes.index(label) for label in labels),
        lowercase=params.lowercase,
        trained_with=trained_with,
    )

    logger.info(
        "classifier_trained",
        examples=len(examples),
        labels=list(labels),
        features=len(vocabulary),
        dropped_features=len(counts) - len(vocabulary),
        iterations=params.iterations,
    )
    return classifier


def train_classifier(
    handle: ModelHandle | None,
    corpus_path: Path | str,
    params: TrainingParams | None = None,
) -> TrainedClassifier:
    """
    Read a corpus file and train a classifier.

    With a model handle, example text is lemmatized by the same pipeline
    that normalizes incoming messages. Without one, examples are split on
    whitespace, which keeps tests independent of model artifacts.
    """
    examples = read_corpus(corpus_path)
    normalizer = TextNormalizer(handle) if handle is not None else None
    return fit(examples, params, normalizer, source=corpus_path)


def save_classifier(classifier: TrainedClassifier, path: Path | str) -> Path:
    """Persist a trained classifier."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    joblib.dump(classifier, path)
    logger.info("classifier_saved", path=str(path), labels=list(classifier.labels))
    return path


def load_classifier(path: Path | str) -> TrainedClassifier:
    """
    Load a classifier written by save_classifier.

    Raises:
        ClassifierUnavailableError: missing or foreign file
    """
    path = Path(path)
    try:
        classifier = joblib.load(path)
    except Exception as e:
        raise ClassifierUnavailableError(f"Cannot load classifier from {path}: {e}") from e

    if not isinstance(classifier, TrainedClassifier):
        raise ClassifierUnavailableError(
            f"{path} holds a {type(classifier).__name__}, not a trained classifier"
        )
    logger.info("classifier_loaded", path=str(path), labels=list(classifier.labels))
    return classifier
