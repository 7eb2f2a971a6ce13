"""
Labeled training corpus.

One example per line: the first whitespace-delimited token is the category
label, the rest of the line is the example text. Blank lines and lines
starting with ``#`` are ignored. A line with a label but no text aborts
the read.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import structlog

from intentbot.errors import CorpusFormatError, EmptyCorpusError

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class LabeledExample:
    """A (category, text) pair from one corpus line."""

    category: str
    text: str
    line_no: int = 0


def parse_line(line: str, path: Path | str = "<corpus>", line_no: int = 0) -> LabeledExample | None:
    """
    Parse one corpus line.

    Returns None for blank and comment lines.

    Raises:
        CorpusFormatError: the line has a label but no example text
    """
    stripped = line.strip()
    if not stripped or stripped.startswith("#"):
        return None

    parts = stripped.split(maxsplit=1)
    if len(parts) < 2:
        raise CorpusFormatError(
            path, f"line has category {parts[0]!r} but no example text", line_no
        )
    return LabeledExample(category=parts[0], text=parts[1].strip(), line_no=line_no)


def read_corpus(path: Path | str) -> list[LabeledExample]:
    """
    Read every labeled example from a UTF-8 corpus file.

    Raises:
        CorpusFormatError: unreadable file or malformed line
        EmptyCorpusError: no examples in the file
    """
    path = Path(path)
    examples: list[LabeledExample] = []

    try:
        with open(path, encoding="utf-8") as f:
            for line_no, line in enumerate(f, start=1):
                example = parse_line(line, path, line_no)
                if example is not None:
                    examples.append(example)
    except (OSError, UnicodeDecodeError) as e:
        raise CorpusFormatError(path, f"cannot read corpus ({e})") from e

    if not examples:
        raise EmptyCorpusError(path)

    logger.info(
        "corpus_read",
        path=str(path),
        examples=len(examples),
        categories=len({example.category for example in examples}),
    )
    return examples


def categories_in_order(examples: list[LabeledExample]) -> tuple[str, ...]:
    """Distinct categories in the order they first appear."""
    return tuple(dict.fromkeys(example.category for example in examples))
