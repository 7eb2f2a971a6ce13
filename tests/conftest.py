"""
Shared fixtures.

The pipeline models here are real NLTK objects that need no downloaded
data: an untrained Punkt detector, the Treebank tokenizer, a unigram
tagger trained on a handful of sentences, and a dictionary lemmatizer.
"""

from pathlib import Path

import joblib
import pytest
from nltk.tag import DefaultTagger, UnigramTagger
from nltk.tokenize import PunktSentenceTokenizer, TreebankWordTokenizer

from intentbot.nlp.lemmatizers import DictionaryLemmatizer
from intentbot.nlp.models import ModelHandle, ModelPaths

TAGGED_SENTENCES = [
    [("Hello", "UH"), ("there", "RB"), (".", ".")],
    [("How", "WRB"), ("much", "JJ"), ("does", "VBZ"), ("it", "PRP"), ("cost", "VB"), ("?", ".")],
    [("how", "WRB"), ("much", "JJ"), ("is", "VBZ"), ("it", "PRP")],
    [("The", "DT"), ("cars", "NNS"), ("are", "VBP"), ("fast", "JJ"), (".", ".")],
]

LEMMA_ENTRIES = [
    ("does", "VBZ", "do"),
    ("is", "VBZ", "be"),
    ("are", "VBP", "be"),
    ("cars", "NNS", "car"),
]

SCENARIO_CORPUS = "greeting Hello there\nprice-inquiry How much does it cost\n"


def build_handle() -> ModelHandle:
    return ModelHandle(
        sentence=PunktSentenceTokenizer(),
        token=TreebankWordTokenizer(),
        pos=UnigramTagger(TAGGED_SENTENCES, backoff=DefaultTagger("NN")),
        lemma=DictionaryLemmatizer(LEMMA_ENTRIES),
    )


@pytest.fixture
def handle() -> ModelHandle:
    """In-memory pipeline models."""
    return build_handle()


@pytest.fixture
def model_paths(tmp_path: Path) -> ModelPaths:
    """The same pipeline models written to disk with joblib."""
    paths = ModelPaths.in_directory(tmp_path / "models")
    paths.sentence.parent.mkdir(parents=True)
    handle = build_handle()
    joblib.dump(handle.sentence, paths.sentence)
    joblib.dump(handle.token, paths.token)
    joblib.dump(handle.pos, paths.pos)
    joblib.dump(handle.lemma, paths.lemma)
    return paths


@pytest.fixture
def corpus_file(tmp_path: Path) -> Path:
    """Two-category corpus: greeting and price-inquiry."""
    path = tmp_path / "corpus.txt"
    path.write_text(SCENARIO_CORPUS, encoding="utf-8")
    return path


@pytest.fixture
def write_corpus(tmp_path: Path):
    """Write arbitrary corpus text and return its path."""

    def _write(text: str, name: str = "custom.txt") -> Path:
        path = tmp_path / name
        path.write_text(text, encoding="utf-8")
        return path

    return _write
