import json
import random

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from wxformat import models  # noqa: F401
from wxformat.db import Base
from wxformat.services.template_service import Template, TemplateStore, TemplateStoreError
from wxformat.storage import MemoryLocalStorage, SqlLocalStorage

DEFAULT_IDS = ["default-1", "default-2", "default-3"]


class BrokenStorage:
    def get_item(self, key):
        raise OSError("storage unavailable")

    def set_item(self, key, value):
        raise OSError("storage unavailable")

    def remove_item(self, key):
        raise OSError("storage unavailable")


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
    engine.dispose()


def test_first_read_seeds_the_defaults(template_store, memory_storage):
    templates = template_store.list()

    assert [row.id for row in templates] == DEFAULT_IDS
    assert [row.theme for row in templates] == ["default", "business", "vibrant"]
    assert all(row.timestamp == "2024-01-02T03:04:05.000Z" for row in templates)
    stored = json.loads(memory_storage.get_item("wx_format_templates"))
    assert [row["id"] for row in stored] == DEFAULT_IDS


def test_default_templates_cannot_be_deleted(template_store, memory_storage):
    template_store.list()
    snapshot = memory_storage.get_item("wx_format_templates")

    assert template_store.delete("default-1") is False
    assert memory_storage.get_item("wx_format_templates") == snapshot
    assert [row.id for row in template_store.list()] == DEFAULT_IDS


def test_save_generates_id_and_appends(template_store):
    template_id = template_store.save({"name": "周报", "description": "", "html": "<p>x</p>", "theme": "elegant"})

    assert template_id.startswith("template-")
    saved = template_store.get(template_id)
    assert saved is not None
    assert saved.name == "周报"
    assert saved.timestamp == "2024-01-02T03:04:05.000Z"
    assert [row.id for row in template_store.list()] == DEFAULT_IDS + [template_id]


def test_saves_in_the_same_millisecond_get_distinct_ids(template_store):
    first = template_store.save({"name": "a", "html": "<p>a</p>"})
    second = template_store.save({"name": "b", "html": "<p>b</p>"})
    assert first != second
    assert len(template_store.list()) == 5


def test_save_with_existing_id_replaces_in_place(template_store):
    template_id = template_store.save(Template(id="mine", name="old", html="<p>old</p>"))
    template_store.save({"id": template_id, "name": "new", "html": "<p>new</p>"})

    rows = template_store.list()
    assert [row.id for row in rows] == DEFAULT_IDS + ["mine"]
    assert template_store.get("mine").name == "new"


def test_delete_custom_template(template_store):
    template_id = template_store.save({"name": "temp", "html": "<p>t</p>"})

    assert template_store.delete(template_id) is True
    assert template_store.get(template_id) is None
    assert template_store.delete(template_id) is False
    assert template_store.delete("missing") is False


def test_corrupt_storage_falls_back_to_defaults():
    storage = MemoryLocalStorage({"wx_format_templates": "not json"})
    store = TemplateStore(storage)

    assert [row.id for row in store.list()] == DEFAULT_IDS
    assert storage.get_item("wx_format_templates") == "not json"


def test_unavailable_storage(caplog):
    store = TemplateStore(BrokenStorage())

    assert [row.id for row in store.list()] == DEFAULT_IDS
    assert "templates_read_failed" in caplog.text
    with pytest.raises(TemplateStoreError):
        store.save({"name": "x", "html": "<p>x</p>"})
    assert store.delete("template-1") is False


def test_apply_pours_text_into_template(template_store):
    html = template_store.apply("default-1", "我的标题\n\n第一段\n\n第二段")

    assert "<h1>我的标题</h1>" in html
    assert "<p>第一段</p>\n<p>第二段</p>\n" in html
    assert "这是文章的导语" not in html
    assert "这是第一部分的正文内容" in html


def test_apply_unknown_template(template_store):
    assert template_store.apply("nope", "text") == ""


def test_random_template_comes_from_store(template_store):
    assert template_store.random_template(random.Random(1)).id in DEFAULT_IDS


def test_sql_local_storage_roundtrip(session_factory):
    storage = SqlLocalStorage(session_factory)

    assert storage.get_item("k") is None
    storage.set_item("k", "v1")
    storage.set_item("k", "v2")
    assert storage.get_item("k") == "v2"
    storage.remove_item("k")
    assert storage.get_item("k") is None
    storage.remove_item("k")


def test_template_store_over_sql_storage(session_factory):
    store = TemplateStore(SqlLocalStorage(session_factory))

    assert [row.id for row in store.list()] == DEFAULT_IDS
    assert store.delete("default-2") is False
    template_id = store.save({"name": "db", "html": "<p>db</p>"})

    reopened = TemplateStore(SqlLocalStorage(session_factory))
    assert reopened.get(template_id).html == "<p>db</p>"
