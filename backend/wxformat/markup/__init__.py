from wxformat.markup.html_formatter import (
    ValidationResult,
    format_html,
    minify_html,
    repair_html,
    validate_html,
)
from wxformat.markup.tag_scanner import VOID_ELEMENTS, TagKind, TagScanner, TagToken, scan_tags
from wxformat.markup.wechat_adapter import DEFAULT_ALT_TEXT, adapt_for_wechat

__all__ = [
    "DEFAULT_ALT_TEXT",
    "TagKind",
    "TagScanner",
    "TagToken",
    "VOID_ELEMENTS",
    "ValidationResult",
    "adapt_for_wechat",
    "format_html",
    "minify_html",
    "repair_html",
    "scan_tags",
    "validate_html",
]
