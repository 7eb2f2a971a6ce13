"""
intentbot

Classifies short free-form messages into intent categories and maps each
category to a canned reply.
"""

__version__ = "0.1.0"

from intentbot.answers import AnswerResolver, Reply
from intentbot.intent import (
    IntentEngine,
    MessageResult,
    TrainedClassifier,
    TrainingParams,
    classify_message,
    train_classifier,
)
from intentbot.nlp import ModelHandle, ModelPaths, TextNormalizer, initialize

__all__ = [
    "__version__",
    "AnswerResolver",
    "Reply",
    "IntentEngine",
    "MessageResult",
    "TrainedClassifier",
    "TrainingParams",
    "classify_message",
    "train_classifier",
    "ModelHandle",
    "ModelPaths",
    "TextNormalizer",
    "initialize",
]
