"""
Answer Resolver

Maps category labels to static replies and composes the reply for a
whole message from its classified sentences.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import TYPE_CHECKING, Iterable, Mapping

import structlog

from intentbot.config import DEFAULT_COMPLETION_CATEGORIES, IntentBotConfig

if TYPE_CHECKING:
    from intentbot.intent.pipeline import MessageResult

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class Reply:
    """The composed answer for one message."""

    text: str
    fragments: tuple[str, ...] = ()
    categories: tuple[str, ...] = ()
    misses: tuple[str, ...] = ()
    skipped: int = 0
    conversation_complete: bool = False

    def __str__(self) -> str:
        return self.text


class AnswerResolver:
    """
    Exact-match lookup from category label to reply text.

    A label with no entry is an answer-lookup miss: it is logged and
    contributes nothing to the composed reply.
    """

    def __init__(
        self,
        table: Mapping[str, str],
        completion_categories: Iterable[str] = DEFAULT_COMPLETION_CATEGORIES,
    ):
        self._table = MappingProxyType(dict(table))
        self._completion = frozenset(completion_categories)

    @classmethod
    def from_config(cls, config: IntentBotConfig) -> "AnswerResolver":
        return cls(config.answers, config.completion_categories)

    @property
    def table(self) -> Mapping[str, str]:
        return self._table

    def resolve(self, label: str) -> str | None:
        """Reply for ``label``, or None when the table has no entry."""
        answer = self._table.get(label)
        if answer is None:
            logger.warning("answer_lookup_miss", category=label)
        return answer

    def unanswered(self, labels: Iterable[str]) -> list[str]:
        """Labels that have no reply in the table."""
        return [label for label in labels if label not in self._table]

    def compose(self, result: MessageResult) -> Reply:
        """Join per-sentence replies in sentence order."""
        fragments: list[str] = []
        misses: list[str] = []
        categories: list[str] = []
        complete = False

        for sentence in result.classified:
            categories.append(sentence.category)
            if sentence.category in self._completion:
                complete = True
            answer = self.resolve(sentence.category)
            if answer is None:
                misses.append(sentence.category)
            else:
                fragments.append(answer)

        return Reply(
            text=" ".join(fragments),
            fragments=tuple(fragments),
            categories=tuple(categories),
            misses=tuple(misses),
            skipped=len(result.skipped),
            conversation_complete=complete,
        )
