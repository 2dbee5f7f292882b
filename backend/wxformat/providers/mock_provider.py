from __future__ import annotations

import json
import random
import re

from wxformat.providers.base import BaseLLMProvider, ChatMessage
from wxformat.services.prompt_templates import FORMAT_MARKER, RECOMMENDABLE_THEMES, THEME_MARKER

_ORIGINAL_TEXT_RE = re.compile(r"original_text:(.*?)(?:\ntheme:|$)", re.DOTALL)
_PARAGRAPH_SPLIT_RE = re.compile(r"\n\s*\n")
_ORDERED_ITEM_RE = re.compile(r"^\d+\.\s*")
_UNORDERED_ITEM_RE = re.compile(r"^[-*]\s*")
_QUOTE_RE = re.compile(r"^>\s*")

SUMMARY_CARD = """
<div class="card">
  <h3>重点总结</h3>
  <p>这是一个由AI自动生成的内容卡片，总结了文章的要点。</p>
</div>
"""

UNRECOGNIZED_REPLY = "未能识别的请求类型"


def _list_block(tag: str, paragraph: str, marker: re.Pattern) -> str:
    items = [item for item in paragraph.split("\n") if item.strip()]
    rows = "".join(f"  <li>{marker.sub('', item.strip())}</li>\n" for item in items)
    return f"<{tag}>\n{rows}</{tag}>\n"


def render_plain_text(text: str) -> str:
    """Rough HTML rendering of plain text, used when no model is available."""
    paragraphs = _PARAGRAPH_SPLIT_RE.split((text or "").strip() or "示例文本")
    parts = [f"<h1>{paragraphs[0].strip()}</h1>\n"]

    for raw in paragraphs[1:]:
        para = raw.strip()
        if not para:
            continue
        if re.match(r"^\d+\.", para):
            parts.append(_list_block("ol", para, _ORDERED_ITEM_RE))
        elif re.match(r"^[-*]", para):
            parts.append(_list_block("ul", para, _UNORDERED_ITEM_RE))
        elif para.startswith(">"):
            parts.append(f"<blockquote>{_QUOTE_RE.sub('', para)}</blockquote>\n")
        else:
            parts.append(f"<p>{para}</p>\n")

    parts.append("<hr>\n")
    parts.append(SUMMARY_CARD)
    return "".join(parts)


class MockProvider(BaseLLMProvider):
    """Canned replies shaped like a real model's, for demos and offline runs."""

    name = "mock"

    def __init__(self, rng: random.Random | None = None):
        super().__init__(None)
        self.rng = rng or random.Random()

    def complete(self, messages: list[ChatMessage], *, request_label: str = "complete") -> str:
        user_message = next((row["content"] for row in messages if row["role"] == "user"), "")

        if FORMAT_MARKER in user_message:
            match = _ORIGINAL_TEXT_RE.search(user_message)
            original_text = match.group(1).strip() if match else "示例文本"
            return json.dumps({"html": render_plain_text(original_text), "message": "排版完成"}, ensure_ascii=False)

        if THEME_MARKER in user_message:
            theme, theme_name = self.rng.choice(RECOMMENDABLE_THEMES)
            return json.dumps({"theme": theme, "themeName": theme_name}, ensure_ascii=False)

        return UNRECOGNIZED_REPLY
