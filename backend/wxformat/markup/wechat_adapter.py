from __future__ import annotations

import re

DEFAULT_ALT_TEXT = "图片"

BLOCKED_ELEMENTS = ("script", "iframe", "embed", "object", "style")

_BLOCKED_ELEMENT_RE = re.compile(
    r"<(" + "|".join(BLOCKED_ELEMENTS) + r")\b[^>]*>[\s\S]*?<\/\1\s*>",
    re.IGNORECASE,
)
_EVENT_HANDLER_RE = re.compile(r'\s+on\w+="[^"]*"', re.IGNORECASE)
_STYLE_ATTR_RE = re.compile(r'(\s+)style="([^"]*)"', re.IGNORECASE)
_IMG_TAG_RE = re.compile(r"<img\b([^>]*?)(\s*/)?>", re.IGNORECASE)
_ALT_ATTR_RE = re.compile(r"\salt\s*=", re.IGNORECASE)
_POSITION_DECL_RE = re.compile(r"^\s*position\s*:", re.IGNORECASE)


def strip_blocked_elements(markup: str) -> str:
    return _BLOCKED_ELEMENT_RE.sub("", markup)


def strip_event_handlers(markup: str) -> str:
    return _EVENT_HANDLER_RE.sub("", markup)


def _drop_position(match: re.Match) -> str:
    lead, value = match.group(1), match.group(2)
    parts = value.split(";")
    kept = [part for part in parts if not _POSITION_DECL_RE.match(part)]
    if len(kept) == len(parts):
        return match.group(0)
    if not any(part.strip() for part in kept):
        return ""
    return f'{lead}style="{";".join(kept).strip()}"'


def strip_position_styles(markup: str) -> str:
    return _STYLE_ATTR_RE.sub(_drop_position, markup)


def ensure_image_alt(markup: str, alt_text: str = DEFAULT_ALT_TEXT) -> str:
    def _patch(match: re.Match) -> str:
        attributes, closing = match.group(1), match.group(2) or ""
        if _ALT_ATTR_RE.search(attributes):
            return match.group(0)
        return f'<img{attributes} alt="{alt_text}"{closing.strip()}>'

    return _IMG_TAG_RE.sub(_patch, markup)


def adapt_for_wechat(markup: str | None, alt_text: str = DEFAULT_ALT_TEXT) -> str:
    """Patch formatted HTML for pasting into the WeChat article editor.

    Drops elements the editor rejects, inline event handlers and ``position``
    declarations, and gives every image an ``alt``. Regex based and narrow;
    not a security sanitizer.
    """
    if not markup:
        return ""

    adapted = strip_blocked_elements(markup)
    adapted = strip_event_handlers(adapted)
    adapted = strip_position_styles(adapted)
    return ensure_image_alt(adapted, alt_text)
