"""
Artifact builder

Builds the four pipeline artifacts from NLTK components and writes them
with joblib, so a fresh install can produce the files the Model Store
loads. The POS tagger and the WordNet lemmatizer need NLTK data packages
(``averaged_perceptron_tagger_eng`` and ``wordnet``).
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import joblib
import structlog
from nltk.tag import PerceptronTagger
from nltk.tokenize import PunktSentenceTokenizer, TreebankWordTokenizer

from intentbot.errors import ModelBuildError
from intentbot.nlp.lemmatizers import DictionaryLemmatizer, WordNetTagLemmatizer
from intentbot.nlp.models import ModelPaths, Stage

logger = structlog.get_logger(__name__)


def build_sentence_model(train_text: str | None = None) -> PunktSentenceTokenizer:
    """Punkt sentence detector, optionally trained on domain text."""
    return PunktSentenceTokenizer(train_text) if train_text else PunktSentenceTokenizer()


def build_token_model() -> TreebankWordTokenizer:
    return TreebankWordTokenizer()


def build_pos_model() -> PerceptronTagger:
    try:
        return PerceptronTagger()
    except LookupError as e:
        raise ModelBuildError(
            "POS tagger data missing; run: python -m nltk.downloader averaged_perceptron_tagger_eng"
        ) from e


def build_lemma_model(dictionary: Path | None = None) -> Any:
    """Dictionary lemmatizer when a dictionary file is given, WordNet otherwise."""
    if dictionary is not None:
        try:
            return DictionaryLemmatizer.from_file(dictionary)
        except (OSError, ValueError) as e:
            raise ModelBuildError(f"Cannot read lemma dictionary {dictionary}: {e}") from e

    lemmatizer = WordNetTagLemmatizer()
    try:
        lemmatizer.lemmatize(["cats"], ["NNS"])
    except LookupError as e:
        raise ModelBuildError(
            "WordNet data missing; run: python -m nltk.downloader wordnet"
        ) from e
    return lemmatizer


def build_models(
    output_dir: Path,
    train_text: Path | None = None,
    lemma_dictionary: Path | None = None,
) -> ModelPaths:
    """
    Build and write all four artifacts into ``output_dir``.

    Returns:
        Paths of the written artifacts
    """
    text = train_text.read_text(encoding="utf-8") if train_text else None
    models = {
        Stage.SENTENCE: build_sentence_model(text),
        Stage.TOKEN: build_token_model(),
        Stage.POS: build_pos_model(),
        Stage.LEMMA: build_lemma_model(lemma_dictionary),
    }

    output_dir.mkdir(parents=True, exist_ok=True)
    paths = ModelPaths.in_directory(output_dir)
    for stage, model in models.items():
        path = paths.for_stage(stage)
        joblib.dump(model, path)
        logger.info("model_written", stage=stage.value, path=str(path), kind=type(model).__name__)

    return paths
