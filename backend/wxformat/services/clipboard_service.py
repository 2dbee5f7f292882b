from __future__ import annotations

import html as html_lib
import logging
import re
from dataclasses import asdict, dataclass
from typing import Callable, Sequence

from wxformat.config import settings
from wxformat.markup import adapt_for_wechat, minify_html, repair_html
from wxformat.markup.tag_scanner import TAG_PATTERN
from wxformat.markup.wechat_adapter import strip_blocked_elements

logger = logging.getLogger("wx_format.clipboard")

_COMMENT_RE = re.compile(r"<!--[\s\S]*?-->")
_LINE_BREAK_RE = re.compile(r"<br\s*/?>", re.IGNORECASE)
_BLOCK_END_RE = re.compile(r"</(?:p|div|section|h[1-6]|li|blockquote|tr|ul|ol|pre|table)\s*>", re.IGNORECASE)
_BLANK_RUN_RE = re.compile(r"\n{3,}")


@dataclass(frozen=True)
class ClipboardPayload:
    html: str
    text: str

    def as_dict(self) -> dict[str, str]:
        return asdict(self)


ClipboardStrategy = tuple[str, Callable[[ClipboardPayload], bool]]


def html_to_text(markup: str | None) -> str:
    if not markup:
        return ""
    text = strip_blocked_elements(_COMMENT_RE.sub("", markup))
    text = _LINE_BREAK_RE.sub("\n", text)
    text = _BLOCK_END_RE.sub("\n", text)
    text = TAG_PATTERN.sub("", text)
    text = html_lib.unescape(text)
    lines = [line.strip() for line in text.splitlines()]
    return _BLANK_RUN_RE.sub("\n\n", "\n".join(lines)).strip()


def build_clipboard_payload(markup: str | None, alt_text: str | None = None) -> ClipboardPayload:
    adapted = adapt_for_wechat(markup, alt_text or settings.image_alt_placeholder)
    prepared = minify_html(repair_html(adapted))
    return ClipboardPayload(html=prepared, text=html_to_text(prepared))


class ClipboardWriter:
    """Writes rich text through an ordered chain of clipboard backends.

    The caller supplies the chain, conventionally ``structured`` (selection
    copy), ``rich`` (HTML clipboard item) and ``plain_text``. The first backend
    that reports success wins.
    """

    def __init__(self, strategies: Sequence[ClipboardStrategy]):
        self.strategies = list(strategies)

    def write_rich_text(self, markup: str | None) -> bool:
        if not (markup or "").strip():
            logger.error("clipboard_write_skipped reason=empty")
            return False

        payload = build_clipboard_payload(markup)
        for label, strategy in self.strategies:
            try:
                if strategy(payload):
                    logger.info("clipboard_write_done strategy=%s html_chars=%d", label, len(payload.html))
                    return True
                logger.warning("clipboard_write_declined strategy=%s", label)
            except Exception as exc:
                logger.warning("clipboard_write_error strategy=%s reason=%s", label, exc)

        logger.error("clipboard_write_failed strategies=%s", [label for label, _ in self.strategies])
        return False
