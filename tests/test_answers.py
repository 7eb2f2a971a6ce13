"""
Tests for the Answer Resolver.
"""

import pytest

from intentbot.answers import AnswerResolver, Reply
from intentbot.config import DEFAULT_ANSWERS, IntentBotConfig
from intentbot.errors import AlignmentError
from intentbot.intent.pipeline import ClassifiedSentence, MessageResult, SkippedSentence
from intentbot.nlp.normalizer import NormalizedSentence


def classified(index: int, category: str) -> ClassifiedSentence:
    sentence = NormalizedSentence(text="x", span=(0, 1), tokens=("x",), tags=("NN",), lemmas=("x",))
    return ClassifiedSentence(index=index, text="x", category=category, score=0.9, sentence=sentence)


@pytest.fixture
def resolver() -> AnswerResolver:
    return AnswerResolver(DEFAULT_ANSWERS, completion_categories=["conversation-complete", "nice-ending"])


class TestResolve:
    """Tests for single lookups."""

    def test_known_label(self, resolver: AnswerResolver):
        assert resolver.resolve("price-inquiry") == "Price is $300,000"

    def test_missing_label(self, resolver: AnswerResolver):
        assert resolver.resolve("weather") is None

    def test_exact_match_only(self, resolver: AnswerResolver):
        assert resolver.resolve("Greeting") is None

    def test_table_is_read_only(self, resolver: AnswerResolver):
        with pytest.raises(TypeError):
            resolver.table["greeting"] = "changed"

    def test_unanswered(self, resolver: AnswerResolver):
        assert resolver.unanswered(["greeting", "weather", "cfa"]) == ["weather"]

    def test_from_config(self):
        config = IntentBotConfig(answers={"greeting": "Hi!"}, completion_categories=["greeting"])
        resolver = AnswerResolver.from_config(config)
        assert resolver.resolve("greeting") == "Hi!"
        assert resolver.resolve("cfa") is None


class TestCompose:
    """Tests for whole-message replies."""

    def test_fragments_in_sentence_order(self, resolver: AnswerResolver):
        result = MessageResult(
            text="...",
            outcomes=(classified(0, "greeting"), classified(1, "price-inquiry")),
        )
        reply = resolver.compose(result)
        assert isinstance(reply, Reply)
        assert reply.text == "Hello, how can I help you? Price is $300,000"
        assert reply.categories == ("greeting", "price-inquiry")
        assert str(reply) == reply.text

    def test_skipped_sentence_contributes_nothing(self, resolver: AnswerResolver):
        result = MessageResult(
            text="...",
            outcomes=(
                classified(0, "greeting"),
                SkippedSentence(1, "broken", AlignmentError(["a", "b"], ["DT"])),
                classified(2, "cfa"),
            ),
        )
        reply = resolver.compose(result)
        assert reply.text == "Hello, how can I help you? Chik-Fil-a"
        assert reply.skipped == 1

    def test_lookup_miss_is_reported(self, resolver: AnswerResolver):
        result = MessageResult(text="...", outcomes=(classified(0, "weather"), classified(1, "cfa")))
        reply = resolver.compose(result)
        assert reply.text == "Chik-Fil-a"
        assert reply.misses == ("weather",)

    def test_conversation_complete(self, resolver: AnswerResolver):
        result = MessageResult(text="bye", outcomes=(classified(0, "nice-ending"),))
        assert resolver.compose(result).conversation_complete is True

    def test_empty_message(self, resolver: AnswerResolver):
        reply = resolver.compose(MessageResult(text=""))
        assert reply.text == ""
        assert reply.conversation_complete is False
