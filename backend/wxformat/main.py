from __future__ import annotations

from typing import Callable

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from wxformat.config import settings
from wxformat.db import Base, SessionLocal, engine
from wxformat.logging_setup import configure_runtime_logging
from wxformat.markup import adapt_for_wechat, format_html, minify_html, repair_html, validate_html
from wxformat.providers.base import BaseLLMProvider
from wxformat.providers.factory import get_provider
from wxformat.schemas import (
    ApplyTemplateRequest,
    ClipboardOut,
    FormatTextOut,
    FormatTextRequest,
    HealthOut,
    MarkupOut,
    MarkupRequest,
    TemplateDeleteOut,
    TemplateIn,
    TemplateOut,
    TemplateSavedOut,
    ThemeOut,
    ThemeRecommendRequest,
    ValidationOut,
)
from wxformat.services.clipboard_service import build_clipboard_payload
from wxformat.services.formatting_service import EmptyInputError, request_formatting, request_theme_recommendation
from wxformat.services.prompt_templates import THEMES
from wxformat.services.template_service import TemplateStore, TemplateStoreError
from wxformat.storage import SqlLocalStorage

app = FastAPI(title=settings.app_name)
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.frontend_origin, "*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
def on_startup():
    configure_runtime_logging()
    Base.metadata.create_all(bind=engine)


def get_template_store() -> TemplateStore:
    return TemplateStore(SqlLocalStorage(SessionLocal))


def get_llm_provider_factory() -> Callable[[str | None], BaseLLMProvider]:
    return get_provider


@app.get("/health", response_model=HealthOut)
def health():
    return {"status": "ok"}


@app.post(f"{settings.api_prefix}/format", response_model=FormatTextOut)
def format_text(req: FormatTextRequest, provider_factory=Depends(get_llm_provider_factory)):
    try:
        result = request_formatting(req.text, req.theme, provider=provider_factory(req.provider))
    except EmptyInputError:
        raise HTTPException(status_code=400, detail="Please enter the text to format")
    return result.as_dict()


@app.post(f"{settings.api_prefix}/themes/recommend", response_model=ThemeOut)
def recommend_theme(req: ThemeRecommendRequest, provider_factory=Depends(get_llm_provider_factory)):
    try:
        recommendation = request_theme_recommendation(req.text, provider=provider_factory(req.provider))
    except EmptyInputError:
        raise HTTPException(status_code=400, detail="Please enter text to get a theme recommendation")
    return recommendation.as_dict()


@app.get(f"{settings.api_prefix}/themes", response_model=list[ThemeOut])
def list_themes():
    return [{"theme": theme, "themeName": label} for theme, label in THEMES.items()]


@app.post(f"{settings.api_prefix}/html/format", response_model=MarkupOut)
def format_markup(req: MarkupRequest):
    return {"html": format_html(req.html)}


@app.post(f"{settings.api_prefix}/html/minify", response_model=MarkupOut)
def minify_markup(req: MarkupRequest):
    return {"html": minify_html(req.html)}


@app.post(f"{settings.api_prefix}/html/validate", response_model=ValidationOut)
def validate_markup(req: MarkupRequest):
    return validate_html(req.html).as_dict()


@app.post(f"{settings.api_prefix}/html/fix", response_model=MarkupOut)
def fix_markup(req: MarkupRequest):
    return {"html": repair_html(req.html)}


@app.post(f"{settings.api_prefix}/html/adapt", response_model=MarkupOut)
def adapt_markup(req: MarkupRequest):
    return {"html": adapt_for_wechat(req.html, settings.image_alt_placeholder)}


@app.post(f"{settings.api_prefix}/clipboard", response_model=ClipboardOut)
def clipboard_payload(req: MarkupRequest):
    if not req.html.strip():
        raise HTTPException(status_code=400, detail="Nothing to copy")
    return build_clipboard_payload(req.html).as_dict()


@app.get(f"{settings.api_prefix}/templates", response_model=list[TemplateOut])
def list_templates(store: TemplateStore = Depends(get_template_store)):
    return [row.model_dump() for row in store.list()]


@app.get(f"{settings.api_prefix}/templates/random", response_model=TemplateOut)
def random_template(store: TemplateStore = Depends(get_template_store)):
    return store.random_template().model_dump()


@app.get(f"{settings.api_prefix}/templates/{{template_id}}", response_model=TemplateOut)
def get_template(template_id: str, store: TemplateStore = Depends(get_template_store)):
    row = store.get(template_id)
    if row is None:
        raise HTTPException(status_code=404, detail="Template not found")
    return row.model_dump()


@app.post(f"{settings.api_prefix}/templates", response_model=TemplateSavedOut)
def save_template(req: TemplateIn, store: TemplateStore = Depends(get_template_store)):
    if not req.name.strip():
        raise HTTPException(status_code=400, detail="Template name is required")
    if not req.html.strip():
        raise HTTPException(status_code=400, detail="Nothing to save")
    try:
        template_id = store.save(req.model_dump(exclude_none=True) | {"name": req.name.strip()})
    except TemplateStoreError as exc:
        raise HTTPException(status_code=500, detail=str(exc))
    return {"id": template_id}


@app.delete(f"{settings.api_prefix}/templates/{{template_id}}", response_model=TemplateDeleteOut)
def delete_template(template_id: str, store: TemplateStore = Depends(get_template_store)):
    return {"template_id": template_id, "deleted": store.delete(template_id)}


@app.post(f"{settings.api_prefix}/templates/{{template_id}}/apply", response_model=MarkupOut)
def apply_template(template_id: str, req: ApplyTemplateRequest, store: TemplateStore = Depends(get_template_store)):
    if store.get(template_id) is None:
        raise HTTPException(status_code=404, detail="Template not found")
    return {"html": store.apply(template_id, req.text)}
