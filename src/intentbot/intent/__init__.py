"""
Intent Classification Module

Trains the category classifier and classifies normalized messages.
"""

from intentbot.intent.classifier import Classification, TrainedClassifier, classify
from intentbot.intent.corpus import LabeledExample, read_corpus
from intentbot.intent.engine import IntentEngine
from intentbot.intent.pipeline import (
    ClassifiedSentence,
    MessageResult,
    SkippedSentence,
    classify_message,
)
from intentbot.intent.trainer import (
    TrainingParams,
    fit,
    load_classifier,
    save_classifier,
    train_classifier,
)

__all__ = [
    "Classification",
    "TrainedClassifier",
    "classify",
    "LabeledExample",
    "read_corpus",
    "IntentEngine",
    "ClassifiedSentence",
    "MessageResult",
    "SkippedSentence",
    "classify_message",
    "TrainingParams",
    "fit",
    "load_classifier",
    "save_classifier",
    "train_classifier",
]
