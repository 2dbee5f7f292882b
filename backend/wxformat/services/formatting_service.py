from __future__ import annotations

import json
import logging
import re
from dataclasses import asdict, dataclass
from typing import Any

from wxformat.config import settings
from wxformat.providers.base import BaseLLMProvider, CompletionError, preview_text
from wxformat.providers.factory import get_provider
from wxformat.providers.mock_provider import MockProvider
from wxformat.services.prompt_templates import (
    FALLBACK_THEME,
    THEMES,
    build_format_messages,
    build_theme_messages,
)

logger = logging.getLogger("wx_format.formatting")

_FENCE_STRIP_RE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)


class EmptyInputError(ValueError):
    pass


@dataclass(frozen=True)
class FormatResult:
    html: str
    message: str

    def as_dict(self) -> dict[str, str]:
        return asdict(self)


@dataclass(frozen=True)
class ThemeRecommendation:
    theme: str
    theme_name: str

    def as_dict(self) -> dict[str, str]:
        return {"theme": self.theme, "themeName": self.theme_name}


def _escape_newlines_in_json_strings(text: str) -> str:
    out: list[str] = []
    in_string = False
    escaped = False
    for ch in text:
        if escaped:
            out.append(ch)
            escaped = False
            continue
        if ch == "\\":
            out.append(ch)
            escaped = True
            continue
        if ch == '"':
            out.append(ch)
            in_string = not in_string
            continue
        if in_string and ch in ("\r", "\n"):
            if ch == "\n":
                out.append("\\n")
            continue
        out.append(ch)
    return "".join(out)


def _repair_json_candidate(text: str) -> str:
    repaired = _escape_newlines_in_json_strings(text)
    return re.sub(r",(\s*[}\]])", r"\1", repaired)


def _json_span(content: str) -> str | None:
    cleaned = _FENCE_STRIP_RE.sub("", (content or "").strip()).strip()
    first = cleaned.find("{")
    last = cleaned.rfind("}")
    if first < 0 or last <= first:
        return None
    return cleaned[first : last + 1]


def _parse_json_object(span: str) -> dict[str, Any] | None:
    for attempt in (span, _repair_json_candidate(span)):
        try:
            payload = json.loads(attempt)
        except ValueError:
            continue
        if isinstance(payload, dict):
            return payload
    return None


def _wrap_plain(content: str) -> str:
    return f"<p>{content}</p>"


def parse_format_reply(content: str) -> FormatResult:
    span = _json_span(content)
    if span is None:
        return FormatResult(html=_wrap_plain(content), message="formatted (non-JSON reply)")

    payload = _parse_json_object(span)
    if payload is None or not str(payload.get("html") or "").strip():
        logger.warning("format_reply_unparseable preview=%s", preview_text(content))
        return FormatResult(html=_wrap_plain(content), message="formatted (unparseable reply)")

    return FormatResult(html=str(payload["html"]), message=str(payload.get("message") or "排版完成"))


def parse_theme_reply(content: str) -> ThemeRecommendation:
    span = _json_span(content)
    payload = _parse_json_object(span) if span else None
    theme = str((payload or {}).get("theme") or "").strip().lower()
    if theme not in THEMES:
        logger.warning("theme_reply_unusable preview=%s -- using %s", preview_text(content), FALLBACK_THEME["theme"])
        return ThemeRecommendation(theme=FALLBACK_THEME["theme"], theme_name=FALLBACK_THEME["themeName"])

    theme_name = str((payload or {}).get("themeName") or "").strip() or THEMES[theme]
    return ThemeRecommendation(theme=theme, theme_name=theme_name)


def _require_text(text: str | None) -> str:
    cleaned = (text or "").strip()
    if not cleaned:
        raise EmptyInputError("text must not be empty")
    return cleaned


def request_formatting(
    text: str,
    theme: str = "default",
    provider: BaseLLMProvider | None = None,
) -> FormatResult:
    """Ask the completion service to turn plain text into article HTML.

    A failing service never surfaces to the caller: the canned renderer takes
    over and the returned message says so.
    """
    cleaned = _require_text(text)
    theme = (theme or "default").strip() or "default"
    active = provider or get_provider()
    messages = build_format_messages(cleaned, theme)

    try:
        content = active.complete(messages, request_label="format_text")
    except CompletionError as exc:
        logger.warning("format_request_failed provider=%s reason=%s -- using canned formatting", active.name, exc)
        fallback = parse_format_reply(MockProvider().complete(messages, request_label="format_text"))
        return FormatResult(html=fallback.html, message=f"completion service unavailable, used offline formatting ({exc})")

    result = parse_format_reply(content)
    logger.info(
        "format_request_done provider=%s theme=%s html_chars=%d message=%s",
        active.name,
        theme,
        len(result.html),
        result.message,
    )
    return result


def request_theme_recommendation(
    text: str,
    provider: BaseLLMProvider | None = None,
) -> ThemeRecommendation:
    cleaned = _require_text(text)
    active = provider or get_provider()
    messages = build_theme_messages(cleaned, settings.theme_sample_chars)

    try:
        content = active.complete(messages, request_label="recommend_theme")
    except CompletionError as exc:
        logger.warning("theme_request_failed provider=%s reason=%s -- using canned pick", active.name, exc)
        content = MockProvider().complete(messages, request_label="recommend_theme")

    recommendation = parse_theme_reply(content)
    logger.info("theme_request_done provider=%s theme=%s", active.name, recommendation.theme)
    return recommendation
