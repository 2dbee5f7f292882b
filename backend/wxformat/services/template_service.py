from __future__ import annotations

import json
import logging
import random
import re
from datetime import datetime, timezone
from typing import Any, Callable

from pydantic import BaseModel

from wxformat.config import settings
from wxformat.storage import LocalStorage

logger = logging.getLogger("wx_format.templates")

PROTECTED_PREFIX = "default-"

_PARAGRAPH_SPLIT_RE = re.compile(r"\n\s*\n")
_TITLE_RE = re.compile(r"<h1>.*?</h1>")
_EXAMPLE_PARAGRAPH_RE = re.compile(r"<p>这是.*?</p>")


class TemplateStoreError(RuntimeError):
    pass


class Template(BaseModel):
    id: str
    name: str
    description: str = ""
    html: str
    theme: str = "default"
    timestamp: str = ""


_DEFAULT_TEMPLATE_ROWS: list[dict[str, str]] = [
    {
        "id": "default-1",
        "name": "标准文章",
        "description": "适合一般文章的标准排版",
        "theme": "default",
        "html": """
<h1>文章标题</h1>
<p>这是文章的导语，简要介绍文章的主要内容和目的。</p>
<h2>第一部分</h2>
<p>这是第一部分的正文内容，可以包含多个段落。</p>
<p>这是另一个段落，继续阐述第一部分的内容。</p>
<h2>第二部分</h2>
<p>这是第二部分的正文内容。</p>
<blockquote>这是一段引用文字，可以用来强调重要的观点或引用他人的话。</blockquote>
<h3>小节标题</h3>
<p>这是小节的内容。</p>
<ul>
  <li>列表项一</li>
  <li>列表项二</li>
  <li>列表项三</li>
</ul>
<h2>总结</h2>
<p>这是文章的总结部分，回顾主要观点并给出结论。</p>
<div class="card">
  <h3>延伸阅读</h3>
  <p>这里可以放置相关文章的链接或推荐阅读。</p>
</div>
""",
    },
    {
        "id": "default-2",
        "name": "产品介绍",
        "description": "适合产品介绍和推广的排版",
        "theme": "business",
        "html": """
<h1>产品名称</h1>
<p class="text-center">——解决您的核心需求——</p>
<h2>产品概述</h2>
<p>简要介绍产品的核心功能和主要特点。</p>
<div class="image-container">
  <img src="https://via.placeholder.com/600x300" alt="产品图片">
  <p class="caption">产品效果展示</p>
</div>
<h2>核心优势</h2>
<ol>
  <li><strong>优势一</strong>：详细说明优势一的具体内容。</li>
  <li><strong>优势二</strong>：详细说明优势二的具体内容。</li>
  <li><strong>优势三</strong>：详细说明优势三的具体内容。</li>
</ol>
<h2>功能特点</h2>
<p>详细介绍产品的功能特点。</p>
<h3>功能一</h3>
<p>功能一的详细说明。</p>
<h3>功能二</h3>
<p>功能二的详细说明。</p>
<blockquote>用户反馈：这个功能真的解决了我的大问题！</blockquote>
<h2>如何获取</h2>
<p>介绍产品的获取方式、价格等信息。</p>
<div class="card">
  <h3>限时优惠</h3>
  <p>现在购买享受八折优惠，优惠码：<span class="highlight">PROMO20</span></p>
</div>
<p class="text-center">欢迎联系我们了解更多详情</p>
""",
    },
    {
        "id": "default-3",
        "name": "活动通知",
        "description": "适合活动通知和邀请函的排版",
        "theme": "vibrant",
        "html": """
<h1 class="text-center">活动名称</h1>
<p class="text-center">诚挚邀请您参加</p>
<hr>
<h2>活动详情</h2>
<ul>
  <li><strong>时间</strong>：2023年X月X日 14:00-17:00</li>
  <li><strong>地点</strong>：城市名称 详细地址</li>
  <li><strong>主题</strong>：活动主题描述</li>
  <li><strong>对象</strong>：适合参加的人群</li>
</ul>
<h2>活动亮点</h2>
<p>详细介绍本次活动的亮点和参与者可以获得的价值。</p>
<div class="image-container">
  <img src="https://via.placeholder.com/600x300" alt="活动海报">
</div>
<h2>活动流程</h2>
<ol>
  <li>14:00-14:30 签到</li>
  <li>14:30-15:30 主题分享</li>
  <li>15:30-16:00 互动环节</li>
  <li>16:00-17:00 自由交流</li>
</ol>
<h2>报名方式</h2>
<p>介绍如何报名参加活动。</p>
<div class="card">
  <h3>特别提示</h3>
  <p>请提前报名，现场名额有限！</p>
</div>
<p class="text-center">期待您的参与！</p>
""",
    },
]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _iso(moment: datetime) -> str:
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def default_templates(timestamp: str = "") -> list[Template]:
    return [Template(**row, timestamp=timestamp) for row in _DEFAULT_TEMPLATE_ROWS]


def is_protected(template_id: str) -> bool:
    return str(template_id or "").startswith(PROTECTED_PREFIX)


class TemplateStore:
    """Formatting templates kept as one JSON array under a single storage key.

    The three built-in templates are installed the first time an empty store
    is read, and can never be deleted.
    """

    def __init__(
        self,
        storage: LocalStorage,
        key: str | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        self.storage = storage
        self.key = key or settings.templates_storage_key
        self.clock = clock or _utc_now

    def _decode(self, raw: str | None) -> list[Template]:
        if not raw:
            return []
        rows = json.loads(raw)
        if not isinstance(rows, list):
            raise ValueError(f"expected a JSON array under {self.key!r}")
        return [Template.model_validate(row) for row in rows]

    def _write(self, templates: list[Template]) -> None:
        payload = json.dumps([row.model_dump() for row in templates], ensure_ascii=False)
        self.storage.set_item(self.key, payload)

    def list(self) -> list[Template]:
        try:
            templates = self._decode(self.storage.get_item(self.key))
            if not templates:
                templates = default_templates(_iso(self.clock()))
                self._write(templates)
                logger.info("templates_seeded key=%s count=%d", self.key, len(templates))
            return templates
        except Exception as exc:
            logger.error("templates_read_failed key=%s reason=%s -- using built-in defaults", self.key, exc)
            return default_templates(_iso(self.clock()))

    def get(self, template_id: str) -> Template | None:
        return next((row for row in self.list() if row.id == template_id), None)

    def _new_id(self, existing: set[str]) -> str:
        stamp = int(self.clock().timestamp() * 1000)
        candidate = f"template-{stamp}"
        while candidate in existing:
            stamp += 1
            candidate = f"template-{stamp}"
        return candidate

    def save(self, template: Template | dict[str, Any]) -> str:
        data = template.model_dump() if isinstance(template, Template) else dict(template)
        templates = self.list()
        existing_ids = {row.id for row in templates}

        template_id = str(data.get("id") or "") or self._new_id(existing_ids)
        record = Template(**{**data, "id": template_id, "timestamp": _iso(self.clock())})

        index = next((idx for idx, row in enumerate(templates) if row.id == template_id), None)
        if index is None:
            templates.append(record)
        else:
            templates[index] = record

        try:
            self._write(templates)
        except Exception as exc:
            logger.error("template_save_failed id=%s reason=%s", template_id, exc)
            raise TemplateStoreError("failed to save template") from exc

        logger.info("template_saved id=%s name=%s replaced=%s", template_id, record.name, index is not None)
        return template_id

    def delete(self, template_id: str) -> bool:
        if is_protected(template_id):
            logger.warning("template_delete_refused id=%s reason=built-in", template_id)
            return False

        templates = self.list()
        remaining = [row for row in templates if row.id != template_id]
        if len(remaining) == len(templates):
            return False

        try:
            self._write(remaining)
        except Exception as exc:
            logger.error("template_delete_failed id=%s reason=%s", template_id, exc)
            return False
        logger.info("template_deleted id=%s", template_id)
        return True

    def apply(self, template_id: str, text: str) -> str:
        """Pour plain text into a template's HTML.

        The first paragraph becomes the title; the rest replace the template's
        first example paragraph.
        """
        template = self.get(template_id)
        if template is None:
            logger.error("template_apply_missing id=%s", template_id)
            return ""

        html = template.html
        paragraphs = [para for para in _PARAGRAPH_SPLIT_RE.split(text or "") if para.strip()]
        if paragraphs:
            html = _TITLE_RE.sub(lambda _: f"<h1>{paragraphs[0]}</h1>", html, count=1)

        content_html = "".join(f"<p>{para}</p>\n" for para in paragraphs[1:])
        return _EXAMPLE_PARAGRAPH_RE.sub(lambda _: content_html, html, count=1)

    def random_template(self, rng: random.Random | None = None) -> Template:
        return (rng or random).choice(self.list())
