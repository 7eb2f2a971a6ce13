"""
Lemmatizer artifacts.

Both classes share the lemma-stage interface used by the normalizer:
``lemmatize(tokens, tags) -> list[str]`` with one lemma per token.
They are plain picklable objects so they can be written with joblib.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Sequence

from nltk.stem import WordNetLemmatizer

# Penn Treebank tag prefix -> WordNet part of speech
_PENN_TO_WORDNET = {
    "J": "a",
    "V": "v",
    "N": "n",
    "R": "r",
}


class DictionaryLemmatizer:
    """
    Lemmatizes by looking up (word, tag) pairs in a dictionary.

    The dictionary file format is one entry per line, tab separated:
    ``word<TAB>postag<TAB>lemma``. Unknown words lemmatize to their
    lowercased form.
    """

    def __init__(self, entries: Iterable[tuple[str, str, str]] = ()):
        self._lemmas: dict[str, dict[str, str]] = {}
        for word, tag, lemma in entries:
            self._lemmas.setdefault(word.lower(), {})[tag] = lemma

    @classmethod
    def from_file(cls, path: Path | str) -> "DictionaryLemmatizer":
        entries = []
        with open(path, encoding="utf-8") as f:
            for line_no, line in enumerate(f, start=1):
                line = line.rstrip("\n")
                if not line.strip():
                    continue
                parts = line.split("\t")
                if len(parts) != 3:
                    raise ValueError(f"{path}:{line_no}: expected word, tag and lemma")
                entries.append((parts[0], parts[1], parts[2]))
        return cls(entries)

    def lemmatize(self, tokens: Sequence[str], tags: Sequence[str]) -> list[str]:
        lemmas = []
        for token, tag in zip(tokens, tags):
            by_tag = self._lemmas.get(token.lower())
            if by_tag and tag in by_tag:
                lemmas.append(by_tag[tag])
            else:
                lemmas.append(token.lower())
        return lemmas

    def __len__(self) -> int:
        return sum(len(by_tag) for by_tag in self._lemmas.values())


class WordNetTagLemmatizer:
    """Adapts NLTK's WordNet lemmatizer to Penn Treebank tagged tokens."""

    def __init__(self) -> None:
        self._wordnet = WordNetLemmatizer()

    def lemmatize(self, tokens: Sequence[str], tags: Sequence[str]) -> list[str]:
        lemmas = []
        for token, tag in zip(tokens, tags):
            pos = _PENN_TO_WORDNET.get(tag[:1])
            word = token.lower()
            lemmas.append(self._wordnet.lemmatize(word, pos) if pos else word)
        return lemmas
