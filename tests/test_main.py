from fastapi.testclient import TestClient

import app.main as main_module
from app import dependencies as deps
from app.main import app
from app.services.page_cache import page_cache
from app.settings import Settings
from tests.conftest import FakePrismicClient, make_detail_doc, make_doc


def test_startup_prerenders_pages_and_serves_them(monkeypatch):
    started = []

    def fake_prerender():
        started.append(True)
        page_cache.store("/", "<h1>prebuilt home</h1>")
        return ["/"]

    monkeypatch.setattr(main_module, "prerender_pages", fake_prerender)
    monkeypatch.setattr(main_module, "settings", Settings(PRERENDER_ON_STARTUP=True))

    original_overrides = dict(app.dependency_overrides)
    app.dependency_overrides[deps.get_client_factory] = lambda: FakePrismicClient
    try:
        with TestClient(app) as client:
            res = client.get("/")
            assert res.status_code == 200
            assert res.text == "<h1>prebuilt home</h1>"
    finally:
        app.dependency_overrides = original_overrides

    assert started == [True]
    assert page_cache.get("/") is None  # cleared on shutdown


def test_startup_skips_prerender_when_disabled(monkeypatch):
    started = []
    monkeypatch.setattr(main_module, "prerender_pages", lambda: started.append(True))
    monkeypatch.setattr(main_module, "settings", Settings(PRERENDER_ON_STARTUP=False))

    with TestClient(app) as client:
        res = client.get("/static/Logo.svg")
        assert res.status_code == 200
        assert "spacetraveling" in res.text

    assert started == []


def test_prerender_pages_uses_configured_client(monkeypatch):
    fake = FakePrismicClient(
        first_page={"results": [make_doc("one")]},
        docs={"one": make_detail_doc("one")},
    )
    monkeypatch.setattr(
        main_module.PrismicClient, "from_settings", classmethod(lambda cls, s: fake)
    )

    paths = main_module.prerender_pages()

    assert paths == ["/", "/post/one"]
    assert "Proin et varius" in page_cache.get("/post/one").html
    assert fake.closed is True
