import pytest
from fastapi.testclient import TestClient

from wxformat.main import app, get_llm_provider_factory, get_template_store
from wxformat.providers.mock_provider import MockProvider


@pytest.fixture
def client(template_store):
    app.dependency_overrides[get_llm_provider_factory] = lambda: lambda name=None: MockProvider()
    app.dependency_overrides[get_template_store] = lambda: template_store
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_validate_endpoint(client):
    resp = client.post("/api/html/validate", json={"html": "<div><p>hi</div>"})
    assert resp.status_code == 200
    assert resp.json() == {
        "isValid": False,
        "errors": ["tag not properly closed: expected p, found div", "unclosed tags: div"],
    }


def test_markup_transform_endpoints(client):
    assert client.post("/api/html/fix", json={"html": "<div><p>hi</div>"}).json() == {"html": "<div><p>hi</div></p></div>"}
    assert client.post("/api/html/minify", json={"html": "<p>  a  </p>\n\n<p>b</p>"}).json() == {
        "html": "<p> a </p><p>b</p>"
    }
    assert client.post("/api/html/format", json={"html": "<div><p>a</p></div>"}).json() == {
        "html": "<div>\n  <p>a</p>\n  </div>\n"
    }
    assert client.post("/api/html/adapt", json={"html": '<img src="x.png">'}).json() == {
        "html": '<img src="x.png" alt="图片">'
    }


def test_clipboard_endpoint(client):
    resp = client.post("/api/clipboard", json={"html": "<p>a</p>\n<p>b</p>"})
    assert resp.status_code == 200
    assert resp.json() == {"html": "<p>a</p><p>b</p>", "text": "a\nb"}
    assert client.post("/api/clipboard", json={"html": "  "}).status_code == 400


def test_format_text_endpoint(client):
    resp = client.post("/api/format", json={"text": "标题\n\n正文", "theme": "elegant"})
    assert resp.status_code == 200
    body = resp.json()
    assert "<h1>标题</h1>" in body["html"]
    assert body["message"] == "排版完成"


def test_format_text_requires_text(client):
    assert client.post("/api/format", json={"text": "   "}).status_code == 400
    assert client.post("/api/themes/recommend", json={"text": ""}).status_code == 400


def test_theme_endpoints(client, stub_provider):
    requested = []
    reply = stub_provider('{"theme": "business"}')
    app.dependency_overrides[get_llm_provider_factory] = lambda: lambda name=None: requested.append(name) or reply
    resp = client.post("/api/themes/recommend", json={"text": "财报", "provider": "deepseek"})
    assert requested == ["deepseek"]
    assert resp.json() == {"theme": "business", "themeName": "商务专业"}

    requested.clear()
    resp = client.post("/api/themes/recommend", json={"text": "财报"})
    assert requested == [None]
    assert resp.json() == {"theme": "business", "themeName": "商务专业"}

    themes = client.get("/api/themes").json()
    assert [row["theme"] for row in themes] == ["default", "elegant", "vibrant", "business", "creative"]


def test_template_crud(client):
    listed = client.get("/api/templates").json()
    assert [row["id"] for row in listed] == ["default-1", "default-2", "default-3"]
    assert client.get("/api/templates/default-2").json()["name"] == "产品介绍"
    assert client.get("/api/templates/missing").status_code == 404

    saved = client.post("/api/templates", json={"name": " 我的模板 ", "html": "<h1>T</h1><p>这是例子</p>"})
    assert saved.status_code == 200
    template_id = saved.json()["id"]
    assert client.get(f"/api/templates/{template_id}").json()["name"] == "我的模板"
    assert len(client.get("/api/templates").json()) == 4

    applied = client.post(f"/api/templates/{template_id}/apply", json={"text": "新标题\n\n内容"})
    assert applied.json() == {"html": "<h1>新标题</h1><p>内容</p>\n"}

    assert client.delete("/api/templates/default-1").json() == {"template_id": "default-1", "deleted": False}
    assert client.delete(f"/api/templates/{template_id}").json() == {"template_id": template_id, "deleted": True}
    assert len(client.get("/api/templates").json()) == 3


def test_template_save_requires_name_and_html(client):
    assert client.post("/api/templates", json={"name": "  ", "html": "<p>x</p>"}).status_code == 400
    assert client.post("/api/templates", json={"name": "x", "html": ""}).status_code == 400


def test_apply_unknown_template(client):
    assert client.post("/api/templates/nope/apply", json={"text": "x"}).status_code == 404


def test_random_template_route(client):
    ids = [row["id"] for row in client.get("/api/templates").json()]
    resp = client.get("/api/templates/random")
    assert resp.status_code == 200
    assert resp.json()["id"] in ids
