"""
Tests for the Category Trainer.
"""

import dataclasses
from pathlib import Path

import joblib
import pytest

from intentbot.errors import (
    ClassifierUnavailableError,
    CorpusFormatError,
    EmptyCorpusError,
)
from intentbot.intent.classifier import classify
from intentbot.intent.corpus import LabeledExample
from intentbot.intent.trainer import (
    TrainingParams,
    fit,
    load_classifier,
    save_classifier,
    train_classifier,
)
from intentbot.nlp.models import ModelHandle

HELD_OUT = [
    ["how", "much", "be", "it"],
    ["hello"],
    ["there", "cost"],
    [],
    ["unknown", "words", "only"],
]


class ExplodingLemmatizer:
    def lemmatize(self, tokens, tags):
        raise RuntimeError("lemma model broken")


class TestTrainingParams:
    """Tests for parameter validation."""

    def test_default_params(self):
        params = TrainingParams()
        assert params.iterations == 500
        assert params.cutoff == 0

    def test_invalid_values(self):
        with pytest.raises(ValueError):
            TrainingParams(iterations=0)
        with pytest.raises(ValueError):
            TrainingParams(cutoff=-1)


class TestTrainClassifier:
    """Tests for training from corpus files."""

    def test_label_set_in_first_seen_order(self, corpus_file: Path):
        classifier = train_classifier(None, corpus_file)
        assert classifier.labels == ("greeting", "price-inquiry")
        assert not classifier.is_prior_only

    def test_records_training_settings(self, handle: ModelHandle, corpus_file: Path):
        classifier = train_classifier(handle, corpus_file, TrainingParams(iterations=50, cutoff=1))
        assert classifier.trained_with == {
            "iterations": 50,
            "cutoff": 1,
            "lowercase": True,
            "normalized": True,
        }
        assert train_classifier(None, corpus_file).trained_with["normalized"] is False

    def test_price_inquiry_scenario(self, handle: ModelHandle, corpus_file: Path):
        classifier = train_classifier(handle, corpus_file)
        result = classify(classifier, ["how", "much", "be", "it"])
        assert result.label == "price-inquiry"
        assert result.score > 0.5

    def test_training_is_deterministic(self, corpus_file: Path):
        first = train_classifier(None, corpus_file, TrainingParams(iterations=50))
        second = train_classifier(None, corpus_file, TrainingParams(iterations=50))
        for lemmas in HELD_OUT:
            assert classify(first, lemmas) == classify(second, lemmas)

    def test_single_label_corpus(self, write_corpus):
        path = write_corpus("greeting Hello there\ngreeting Hi\n")
        classifier = train_classifier(None, path)
        assert classifier.is_prior_only
        for lemmas in HELD_OUT:
            result = classify(classifier, lemmas)
            assert result.label == "greeting"
            assert result.score == pytest.approx(1.0)

    def test_cutoff_drops_rare_features(self, write_corpus):
        path = write_corpus(
            "greeting hello hello friend\n"
            "price-inquiry price price cost\n"
        )
        classifier = train_classifier(None, path, TrainingParams(cutoff=2))
        vocabulary = set(classifier.vectorizer.vocabulary_)
        assert vocabulary == {"hello", "price"}

    def test_cutoff_removing_everything_gives_priors(self, write_corpus):
        path = write_corpus("greeting Hello\ngreeting Hi\nprice-inquiry How much\n")
        classifier = train_classifier(None, path, TrainingParams(cutoff=10))
        assert classifier.is_prior_only
        result = classify(classifier, ["how", "much"])
        assert result.label == "greeting"
        assert result.score == pytest.approx(2 / 3)

    def test_lowercase_option(self, write_corpus):
        path = write_corpus("greeting Hello\nprice-inquiry Price\n")
        classifier = train_classifier(None, path, TrainingParams(lowercase=False))
        assert "Hello" in classifier.vectorizer.vocabulary_
        assert "hello" not in classifier.vectorizer.vocabulary_

    def test_uses_normalizer_lemmas(self, handle: ModelHandle, write_corpus):
        path = write_corpus("product-inquiry The cars are fast\ngreeting Hello\n")
        classifier = train_classifier(handle, path)
        assert "car" in classifier.vectorizer.vocabulary_
        assert "be" in classifier.vectorizer.vocabulary_

    def test_normalization_failure_is_format_error(self, handle: ModelHandle, corpus_file: Path):
        broken = dataclasses.replace(handle, lemma=ExplodingLemmatizer())
        with pytest.raises(CorpusFormatError) as exc_info:
            train_classifier(broken, corpus_file)
        assert exc_info.value.line_no == 1

    def test_empty_corpus(self, write_corpus):
        with pytest.raises(EmptyCorpusError):
            train_classifier(None, write_corpus("\n# nothing\n"))

    def test_fit_without_examples(self):
        with pytest.raises(EmptyCorpusError):
            fit([])

    def test_fit_in_memory(self):
        classifier = fit(
            [
                LabeledExample("nice-ending", "bye now"),
                LabeledExample("greeting", "hello there"),
            ]
        )
        assert classifier.labels == ("nice-ending", "greeting")
        assert classify(classifier, ["bye"]).label == "nice-ending"


class TestPersistence:
    """Tests for saving and loading classifiers."""

    def test_saved_classifier_scores_identically(self, corpus_file: Path, tmp_path: Path):
        classifier = train_classifier(None, corpus_file)
        path = save_classifier(classifier, tmp_path / "cache" / "clf.joblib")
        restored = load_classifier(path)
        assert restored.labels == classifier.labels
        for lemmas in HELD_OUT:
            assert classify(restored, lemmas) == classify(classifier, lemmas)

    def test_load_missing(self, tmp_path: Path):
        with pytest.raises(ClassifierUnavailableError):
            load_classifier(tmp_path / "missing.joblib")

    def test_load_foreign_object(self, tmp_path: Path):
        path = tmp_path / "other.joblib"
        joblib.dump(["not", "a", "classifier"], path)
        with pytest.raises(ClassifierUnavailableError, match="list"):
            load_classifier(path)
