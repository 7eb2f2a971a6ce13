"""
Tests for lemmatizer artifacts and the artifact builder.
"""

from pathlib import Path

import joblib
import pytest

from intentbot.errors import ModelBuildError
from intentbot.nlp import build
from intentbot.nlp.lemmatizers import DictionaryLemmatizer, WordNetTagLemmatizer
from intentbot.nlp.models import Stage, load_model


class FakeWordNet:
    def __init__(self):
        self.calls = []

    def lemmatize(self, word, pos="n"):
        self.calls.append((word, pos))
        return {"running": "run", "cars": "car"}.get(word, word)


class TestDictionaryLemmatizer:
    """Tests for the (word, tag) dictionary lemmatizer."""

    def test_lookup_by_word_and_tag(self):
        lemmatizer = DictionaryLemmatizer([("saw", "VBD", "see"), ("saw", "NN", "saw")])
        assert lemmatizer.lemmatize(["Saw", "saw"], ["VBD", "NN"]) == ["see", "saw"]

    def test_unknown_word_lowercased(self):
        assert DictionaryLemmatizer().lemmatize(["Porsche"], ["NNP"]) == ["porsche"]

    def test_from_file(self, tmp_path: Path):
        path = tmp_path / "lemmas.txt"
        path.write_text("is\tVBZ\tbe\nwent\tVBD\tgo\n\n", encoding="utf-8")
        lemmatizer = DictionaryLemmatizer.from_file(path)
        assert len(lemmatizer) == 2
        assert lemmatizer.lemmatize(["went"], ["VBD"]) == ["go"]

    def test_from_malformed_file(self, tmp_path: Path):
        path = tmp_path / "bad.txt"
        path.write_text("is VBZ be\n", encoding="utf-8")
        with pytest.raises(ValueError, match="bad.txt:1"):
            DictionaryLemmatizer.from_file(path)

    def test_survives_joblib(self, tmp_path: Path):
        path = tmp_path / "lemma.joblib"
        joblib.dump(DictionaryLemmatizer([("is", "VBZ", "be")]), path)
        restored = load_model(Stage.LEMMA, path)
        assert restored.lemmatize(["is"], ["VBZ"]) == ["be"]


class TestWordNetTagLemmatizer:
    """Tests for the Penn tag to WordNet adapter."""

    def test_maps_penn_tags(self):
        lemmatizer = WordNetTagLemmatizer()
        fake = FakeWordNet()
        lemmatizer._wordnet = fake

        lemmas = lemmatizer.lemmatize(["Running", "cars", "quickly", "the"], ["VBG", "NNS", "RB", "DT"])
        assert lemmas == ["run", "car", "quickly", "the"]
        assert fake.calls == [("running", "v"), ("cars", "n"), ("quickly", "r")]


class TestBuild:
    """Tests for building artifacts."""

    def test_offline_stages(self):
        sentence = build.build_sentence_model("First one. Second one.")
        assert len(list(sentence.span_tokenize("Hi there. Bye now."))) == 2
        assert build.build_token_model().tokenize("How much?") == ["How", "much", "?"]

    def test_dictionary_lemma_model(self, tmp_path: Path):
        path = tmp_path / "lemmas.txt"
        path.write_text("is\tVBZ\tbe\n", encoding="utf-8")
        assert isinstance(build.build_lemma_model(path), DictionaryLemmatizer)

    def test_unreadable_dictionary(self, tmp_path: Path):
        with pytest.raises(ModelBuildError):
            build.build_lemma_model(tmp_path / "missing.txt")

    def test_missing_tagger_data(self, monkeypatch):
        def missing(*args, **kwargs):
            raise LookupError("Resource averaged_perceptron_tagger_eng not found")

        monkeypatch.setattr(build, "PerceptronTagger", missing)
        with pytest.raises(ModelBuildError, match="averaged_perceptron_tagger_eng"):
            build.build_pos_model()

    def test_build_models_writes_loadable_artifacts(self, tmp_path: Path, monkeypatch, handle):
        monkeypatch.setattr(build, "build_pos_model", lambda: handle.pos)
        lemma_dict = tmp_path / "lemmas.txt"
        lemma_dict.write_text("is\tVBZ\tbe\n", encoding="utf-8")

        paths = build.build_models(tmp_path / "out", lemma_dictionary=lemma_dict)
        for stage in Stage:
            assert paths.for_stage(stage).is_file()
            load_model(stage, paths.for_stage(stage))
