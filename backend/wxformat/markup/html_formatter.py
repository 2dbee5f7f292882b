from __future__ import annotations

import re
from dataclasses import dataclass, field

from wxformat.markup.tag_scanner import TagKind, leading_tag, scan_tags

_TAG_BOUNDARY_RE = re.compile(r">\s*<")
_COMMENT_RE = re.compile(r"<!--[\s\S]*?-->")
_INTER_TAG_SPACE_RE = re.compile(r">\s+<")
_WHITESPACE_RUN_RE = re.compile(r"\s{2,}")
_BARE_AMPERSAND_RE = re.compile(r"&(?!(?:amp|lt|gt|quot|apos|#\d+|#x[\da-f]+);)", re.IGNORECASE)


@dataclass(frozen=True)
class ValidationResult:
    is_valid: bool
    errors: tuple[str, ...] = field(default_factory=tuple)

    def as_dict(self) -> dict:
        return {"isValid": self.is_valid, "errors": list(self.errors)}


def _closes_itself(line: str, name: str) -> bool:
    return line.lower().endswith(f"</{name}>")


def format_html(markup: str | None, indent: str = "  ", compact_inline: bool = False) -> str:
    """Re-emit markup one tag per line, indented by nesting depth.

    This is a line heuristic, not a tree printer. Every line led by a start tag
    indents the lines after it, including one that closes itself (``<p>hi</p>``).
    With ``compact_inline`` such self-contained lines keep the current depth.
    Plain text lines never change the depth.
    """
    if not markup:
        return ""

    lines = _TAG_BOUNDARY_RE.sub(">\n<", markup).split("\n")
    out: list[str] = []
    depth = 0
    for raw_line in lines:
        line = raw_line.strip()
        if not line:
            continue

        token = leading_tag(line)
        if token is not None and token.kind == TagKind.END:
            depth -= 1

        out.append(f"{indent * max(0, depth)}{line}\n")

        if token is not None and token.kind == TagKind.START:
            if compact_inline and _closes_itself(line, token.name):
                continue
            depth += 1

    return "".join(out)


def _strip_comments(markup: str) -> str:
    # Removing one comment can splice the pieces of another together.
    previous = None
    while previous != markup:
        previous = markup
        markup = _COMMENT_RE.sub("", markup)
    return markup


def minify_html(markup: str | None) -> str:
    if not markup:
        return ""

    minified = _strip_comments(markup)
    minified = _INTER_TAG_SPACE_RE.sub("><", minified)
    minified = _WHITESPACE_RUN_RE.sub(" ", minified)
    return minified.strip()


def validate_html(markup: str | None) -> ValidationResult:
    errors: list[str] = []
    open_tags: list[str] = []

    for token in scan_tags(markup):
        if token.kind == TagKind.SELF_CLOSING:
            continue
        if token.kind == TagKind.START:
            open_tags.append(token.name)
            continue

        if not open_tags:
            errors.append(f"extra closing tag: {token.raw_text}")
            continue
        if open_tags[-1] != token.name:
            errors.append(f"tag not properly closed: expected {open_tags[-1]}, found {token.name}")
        open_tags.pop()

    if open_tags:
        errors.append(f"unclosed tags: {', '.join(open_tags)}")

    return ValidationResult(is_valid=not errors, errors=tuple(errors))


def unclosed_tags(markup: str | None) -> list[str]:
    """Names still open after a lenient scan, in open order."""
    open_tags: list[str] = []
    for token in scan_tags(markup):
        if token.kind == TagKind.START:
            open_tags.append(token.name)
        elif token.kind == TagKind.END and open_tags and open_tags[-1] == token.name:
            open_tags.pop()
    return open_tags


def escape_bare_ampersands(markup: str) -> str:
    return _BARE_AMPERSAND_RE.sub("&amp;", markup)


def repair_html(markup: str | None) -> str:
    """Append closing tags for everything left open and escape stray ``&``.

    Mismatched closing tags are left where they are; only names still open at
    the end of the document get a closer.
    """
    if not markup:
        return ""

    closers = "".join(f"</{name}>" for name in reversed(unclosed_tags(markup)))
    return escape_bare_ampersands(markup + closers)
