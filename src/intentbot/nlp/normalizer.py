"""
Text Normalizer

Runs the pretrained models in sequence to turn raw text into
(token, part-of-speech tag, lemma) triples, one sequence per sentence.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

import structlog

from intentbot.errors import AlignmentError, NormalizationError
from intentbot.nlp.models import ModelHandle

logger = structlog.get_logger(__name__)

Span = tuple[int, int]


@dataclass(frozen=True)
class NormalizedSentence:
    """One sentence after tokenization, tagging and lemmatization."""

    text: str
    span: Span
    tokens: tuple[str, ...]
    tags: tuple[str, ...]
    lemmas: tuple[str, ...]

    @property
    def triples(self) -> list[tuple[str, str, str]]:
        return list(zip(self.tokens, self.tags, self.lemmas))

    def __len__(self) -> int:
        return len(self.tokens)


class TextNormalizer:
    """
    Sentence segmentation, tokenization, POS tagging and lemmatization.

    Every method is a pure function of the handle's models and its input.
    Model exceptions are wrapped in NormalizationError so callers can
    skip a single sentence without losing the rest of the message.
    """

    def __init__(self, handle: ModelHandle):
        self._handle = handle

    @property
    def handle(self) -> ModelHandle:
        return self._handle

    def sentence_spans(self, text: str) -> list[Span]:
        """
        Character spans of each sentence in ``text``.

        Boundaries come from the sentence model; anything between two
        model spans is folded into the earlier sentence, so every
        non-whitespace character belongs to exactly one span.
        """
        if not text or text.isspace():
            return []

        try:
            model_spans = list(self._handle.sentence.span_tokenize(text))
        except Exception as e:
            raise NormalizationError("sentence", e) from e

        begin = len(text) - len(text.lstrip())
        starts = sorted({begin} | {start for start, _ in model_spans if begin < start < len(text)})

        spans: list[Span] = []
        for i, start in enumerate(starts):
            end = starts[i + 1] if i + 1 < len(starts) else len(text)
            chunk = text[start:end]
            lead = len(chunk) - len(chunk.lstrip())
            trimmed_end = start + len(chunk.rstrip())
            if start + lead < trimmed_end:
                spans.append((start + lead, trimmed_end))
        return spans

    def detect_sentences(self, text: str) -> list[str]:
        """Split text into sentences. Empty input gives an empty list."""
        sentences = [text[start:end] for start, end in self.sentence_spans(text)]
        logger.debug("sentences_detected", sentences=" | ".join(sentences))
        return sentences

    def tokenize(self, sentence: str) -> list[str]:
        """Split one sentence into word and punctuation tokens."""
        try:
            tokens = [str(token) for token in self._handle.token.tokenize(sentence)]
        except Exception as e:
            raise NormalizationError("token", e) from e
        logger.debug("sentence_tokenized", tokens=" | ".join(tokens))
        return tokens

    def tag_parts_of_speech(self, tokens: Sequence[str]) -> list[str]:
        """One part-of-speech tag per token, in token order."""
        try:
            tags = [str(tag) for _, tag in self._handle.pos.tag(list(tokens))]
        except Exception as e:
            raise NormalizationError("pos", e) from e
        logger.debug("pos_tagged", tags=" | ".join(tags))
        return tags

    def lemmatize(self, tokens: Sequence[str], pos_tags: Sequence[str]) -> list[str]:
        """
        One lemma per token.

        Raises:
            AlignmentError: tokens and tags (or the model's lemmas) differ in length
        """
        if len(tokens) != len(pos_tags):
            raise AlignmentError(tokens, pos_tags)

        try:
            lemmas = [str(lemma) for lemma in self._handle.lemma.lemmatize(list(tokens), list(pos_tags))]
        except Exception as e:
            raise NormalizationError("lemma", e) from e

        if len(lemmas) != len(tokens):
            raise AlignmentError(tokens, lemmas, what="lemmas")
        logger.debug("tokens_lemmatized", lemmas=" | ".join(lemmas))
        return lemmas

    def normalize_sentence(self, sentence: str, span: Span | None = None) -> NormalizedSentence:
        """Tokenize, tag and lemmatize a single sentence."""
        tokens = self.tokenize(sentence)
        tags = self.tag_parts_of_speech(tokens)
        lemmas = self.lemmatize(tokens, tags)
        return NormalizedSentence(
            text=sentence,
            span=span if span is not None else (0, len(sentence)),
            tokens=tuple(tokens),
            tags=tuple(tags),
            lemmas=tuple(lemmas),
        )

    def normalize(self, text: str) -> list[NormalizedSentence]:
        """
        Normalize every sentence of ``text``.

        Strict: the first failing sentence raises its PipelineError. Use the
        message pipeline when failed sentences should be skipped instead.
        """
        return [
            self.normalize_sentence(text[start:end], (start, end))
            for start, end in self.sentence_spans(text)
        ]

    def lemmas_of(self, text: str) -> list[str]:
        """All lemmas of ``text`` across sentences, in order."""
        lemmas: list[str] = []
        for sentence in self.normalize(text):
            lemmas.extend(sentence.lemmas)
        return lemmas


__all__ = ["NormalizedSentence", "TextNormalizer"]
