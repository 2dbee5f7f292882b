from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterator

TAG_PATTERN = re.compile(r"<\/?([a-zA-Z][a-zA-Z0-9]*)\b[^>]*>")

VOID_ELEMENTS = frozenset(
    {
        "area",
        "base",
        "br",
        "col",
        "embed",
        "hr",
        "img",
        "input",
        "link",
        "meta",
        "param",
        "source",
        "track",
        "wbr",
    }
)


class TagKind(str, Enum):
    START = "start"
    END = "end"
    SELF_CLOSING = "self_closing"


@dataclass(frozen=True)
class TagToken:
    name: str
    kind: TagKind
    raw_text: str
    start_offset: int
    end_offset: int


def classify_tag(raw_text: str, name: str) -> TagKind:
    if raw_text.startswith("</"):
        return TagKind.END
    if raw_text.endswith("/>") or name.lower() in VOID_ELEMENTS:
        return TagKind.SELF_CLOSING
    return TagKind.START


def _token_from_match(match: re.Match) -> TagToken:
    raw = match.group(0)
    name = match.group(1).lower()
    return TagToken(
        name=name,
        kind=classify_tag(raw, name),
        raw_text=raw,
        start_offset=match.start(),
        end_offset=match.end(),
    )


class TagScanner:
    """Left-to-right tag tokenizer over a markup string.

    Iterating twice restarts the scan. Anything the tag pattern does not match
    (stray ``<`` or ``>``, comments, doctype) is skipped without error.
    """

    def __init__(self, markup: str | None):
        self.markup = markup or ""

    def __iter__(self) -> Iterator[TagToken]:
        for match in TAG_PATTERN.finditer(self.markup):
            yield _token_from_match(match)


def scan_tags(markup: str | None) -> Iterator[TagToken]:
    return iter(TagScanner(markup))


def leading_tag(line: str) -> TagToken | None:
    match = TAG_PATTERN.match(line or "")
    if not match:
        return None
    return _token_from_match(match)
