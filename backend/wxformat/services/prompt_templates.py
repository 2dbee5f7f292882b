from __future__ import annotations

from wxformat.providers.base import ChatMessage

FORMAT_MARKER = "format_text"
THEME_MARKER = "recommend_theme"

THEMES: dict[str, str] = {
    "default": "默认样式",
    "elegant": "优雅简约",
    "vibrant": "活力多彩",
    "business": "商务专业",
    "creative": "创意设计",
}

RECOMMENDABLE_THEMES: list[tuple[str, str]] = [
    (theme, label) for theme, label in THEMES.items() if theme != "default"
]

FALLBACK_THEME = {"theme": "elegant", "themeName": THEMES["elegant"]}

_FORMAT_SYSTEM_PROMPT = """\
你是一个专业的微信公众号排版助手。你的任务是分析用户提供的文本，并生成适合微信公众号的HTML排版。
注意：
1. 不要改变原文的任何内容，保持原文的完整性
2. 只添加HTML标签进行美化，不要修改或重写原文
3. 识别文章的结构，如标题、段落、列表、引用等
4. 根据内容添加适当的格式，如强调重点内容
5. 返回格式必须是有效的JSON，包含html字段
6. 根据主题风格调整排版样式"""


def _theme_menu() -> str:
    return "\n".join(f"- {theme}: {label}" for theme, label in RECOMMENDABLE_THEMES)


def build_format_messages(text: str, theme: str) -> list[ChatMessage]:
    user = (
        f"请对以下文本进行排版，主题风格：{theme}\n\n"
        f"{FORMAT_MARKER}:\n"
        f"original_text:{text}\n"
        f"theme:{theme}\n\n"
        '请返回JSON格式，包含html字段，例如：{"html": "<h1>标题</h1><p>段落</p>", "message": "排版完成"}'
    )
    return [
        {"role": "system", "content": _FORMAT_SYSTEM_PROMPT},
        {"role": "user", "content": user},
    ]


def build_theme_messages(text: str, sample_chars: int) -> list[ChatMessage]:
    system = (
        "你是一个专业的内容分析助手。你的任务是分析用户提供的文本内容，并推荐最适合的排版主题。\n"
        f"可用的主题有：\n{_theme_menu()}\n\n"
        '返回格式必须是有效的JSON，包含theme和themeName字段。例如：{"theme": "elegant", "themeName": "优雅简约"}'
    )
    user = f"请分析以下文本内容，并推荐最适合的排版主题：\n\n{THEME_MARKER}:\n{text[: max(0, sample_chars)]}"
    return [
        {"role": "system", "content": system},
        {"role": "user", "content": user},
    ]
