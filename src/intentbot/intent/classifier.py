"""
Category Classifier

Scores a bag of lemma tokens against a trained classifier's fixed label set
and selects the best category.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Sequence

import numpy as np
from sklearn.feature_extraction.text import CountVectorizer
from sklearn.linear_model import LogisticRegression


def bag_of_words(tokens: Iterable[str], lowercase: bool = True) -> list[str]:
    """Feature tokens for one document: non-blank tokens, optionally lowercased."""
    words = [token.strip() for token in tokens]
    return [word.lower() if lowercase else word for word in words if word]


def analyze_document(document: Sequence[str]) -> list[str]:
    """CountVectorizer analyzer for documents that are already token lists."""
    return list(document)


@dataclass(frozen=True, eq=False)
class TrainedClassifier:
    """
    Immutable result of training.

    ``labels`` holds every category seen in the corpus, in first-seen
    order. Classifiers trained on a single category, or whose features
    were all cut off, carry no estimator and score by class priors.
    ``trained_with`` records the training settings, so a cached copy can
    be checked against the current configuration.
    """

    labels: tuple[str, ...]
    priors: np.ndarray
    vectorizer: CountVectorizer | None = None
    estimator: LogisticRegression | None = None
    column_order: tuple[int, ...] = ()
    lowercase: bool = True
    trained_with: Mapping[str, Any] = field(default_factory=dict)

    @property
    def is_prior_only(self) -> bool:
        return self.estimator is None

    @property
    def vocabulary_size(self) -> int:
        return 0 if self.vectorizer is None else len(self.vectorizer.vocabulary_)

    def distribution(self, lemmas: Sequence[str]) -> np.ndarray:
        """Probability of each label, in ``labels`` order."""
        if self.estimator is None or self.vectorizer is None:
            return self.priors.copy()

        features = self.vectorizer.transform([bag_of_words(lemmas, self.lowercase)])
        probabilities = self.estimator.predict_proba(features)[0]
        return probabilities[list(self.column_order)]


@dataclass(frozen=True)
class Classification:
    """Best category for one bag of lemmas."""

    label: str
    score: float
    distribution: dict[str, float] = field(default_factory=dict, compare=False)


def classify(model: TrainedClassifier, lemmas: Sequence[str]) -> Classification:
    """
    Pick the highest-probability category.

    Ties go to the label that appeared first in the training corpus.
    An empty ``lemmas`` sequence is valid and yields the model's
    least-informed guess.
    """
    probabilities = model.distribution(lemmas)
    best = int(np.argmax(probabilities))  # first maximum wins
    return Classification(
        label=model.labels[best],
        score=float(probabilities[best]),
        distribution={label: float(p) for label, p in zip(model.labels, probabilities)},
    )
