"""Integration tests for the trace log endpoints via TestClient."""

import pytest
from fastapi.testclient import TestClient

from storefront.app import create_app
from storefront.settings import Settings


@pytest.fixture()
def client():
    settings = Settings(_env_file=None, env="test", trace_enabled=False)
    with TestClient(create_app(settings)) as test_client:
        yield test_client


class TestTraceEndpoints:
    def test_disabled_log_captures_nothing(self, client):
        client.get("/products", params={"category": "Audio"})
        body = client.get("/trace").json()
        assert body == {"enabled": False, "entries": []}

    def test_enable_then_capture(self, client):
        assert client.post("/trace/enable").json()["enabled"] is True

        client.get("/products", params={"category": "Audio"})
        (entry,) = client.get("/trace").json()["entries"]

        assert entry["action"] == "Filter and Sort Products"
        assert entry["query_text"] == "SELECT * FROM products WHERE 1=1\nAND category = '<category>'\nORDER BY name ASC"
        assert entry["params"] == {"category": "Audio"}
        assert "AND category = 'Audio'" in entry["rendered"]

    def test_identifiers_are_reported_as_strings(self, client):
        client.post("/trace/enable")
        client.post("/cart/items", json={"product_id": "ipad-air"})

        entries = client.get("/trace").json()["entries"]
        add = next(entry for entry in entries if entry["action"] == "Add to Cart")
        assert add["params"]["product_id"] == "ipad-air"

    def test_disable_discards_history(self, client):
        client.post("/trace/enable")
        client.get("/products")
        body = client.post("/trace/disable").json()
        assert body == {"enabled": False, "entries": []}

        assert client.post("/trace/enable").json()["entries"] == []

    def test_toggle(self, client):
        assert client.post("/trace/toggle").json()["enabled"] is True
        assert client.post("/trace/toggle").json()["enabled"] is False

    def test_clear(self, client):
        client.post("/trace/enable")
        client.get("/products")
        body = client.delete("/trace").json()
        assert body == {"enabled": True, "entries": []}
