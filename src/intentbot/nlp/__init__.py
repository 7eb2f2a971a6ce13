"""
Text normalization

Pretrained model loading and the sentence → token → POS → lemma pipeline.
"""

from intentbot.nlp.lemmatizers import DictionaryLemmatizer, WordNetTagLemmatizer
from intentbot.nlp.models import (
    ModelHandle,
    ModelPaths,
    Stage,
    initialize,
    load_model,
    load_models,
)
from intentbot.nlp.normalizer import NormalizedSentence, TextNormalizer

__all__ = [
    "DictionaryLemmatizer",
    "WordNetTagLemmatizer",
    "ModelHandle",
    "ModelPaths",
    "Stage",
    "initialize",
    "load_model",
    "load_models",
    "NormalizedSentence",
    "TextNormalizer",
]
