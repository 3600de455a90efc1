"""Tests for the panel API routers.

The lifespan is not run: each test wires a PloiClient (MockTransport),
MemoryNotifier and ServerListCoordinator onto app.state directly.
"""

from contextlib import asynccontextmanager

import httpx
import pytest
from httpx import ASGITransport, AsyncClient

from conftest import API_URL, MemoryCacheStore, raw_server, raw_site

from app.cache.store import dump_records, load_sites, sites_key
from app.main import app
from app.ploi.client import PloiClient
from app.ploi.notifier import MemoryNotifier
from app.schemas.site import normalize_site
from app.sync.coordinator import ServerListCoordinator


def _ploi(request: httpx.Request) -> httpx.Response:
    path = request.url.path
    if request.method == "GET" and path.endswith("/servers"):
        return httpx.Response(200, json={"data": [raw_server(2, "bravo"), raw_server(1, "Alpha")]})
    if request.method == "GET" and path.endswith("/servers/1/sites"):
        return httpx.Response(200, json={"data": [raw_site(5, "shop.io")]})
    if request.method == "GET" and path.endswith("/servers/1/sites/5"):
        return httpx.Response(200, json={"data": raw_site(5, "shop.io")})
    if path.endswith("/fastcgi-cache/flush"):
        return httpx.Response(422, json={"errors": ["Deploy in progress"]})
    if request.method == "POST":
        return httpx.Response(200, json={})
    return httpx.Response(500, json={})


@asynccontextmanager
async def _wired(store: MemoryCacheStore):
    http_client = httpx.AsyncClient(base_url=API_URL, transport=httpx.MockTransport(_ploi))
    notifier = MemoryNotifier()
    client = PloiClient(http_client, notifier)
    coordinator = ServerListCoordinator(client, store)
    await (await coordinator.start())

    app.state.notifier = notifier
    app.state.ploi_client = client
    app.state.coordinator = coordinator

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac, coordinator

    await coordinator.lifetime.drain()
    coordinator.close()
    await http_client.aclose()


@pytest.fixture
async def panel():
    """Panel whose cache already holds the site list of server 1."""
    sites = dump_records([normalize_site(raw_site(5, "shop.io"))])
    store = MemoryCacheStore({sites_key(1): sites})
    async with _wired(store) as (ac, _):
        yield ac


@pytest.fixture
async def fresh_panel():
    """Panel started from an empty cache."""
    store = MemoryCacheStore()
    async with _wired(store) as (ac, coordinator):
        yield ac, coordinator, store


class TestServerEndpoints:
    async def test_list_servers(self, panel):
        response = await panel.get("/api/v1/servers")

        assert response.status_code == 200
        body = response.json()
        assert body["state"] == "ready"
        assert body["loading"] is False
        assert [s["name"] for s in body["data"]] == ["Alpha", "bravo"]
        assert "ipAddress" in body["data"][0]

    async def test_server_detail(self, panel):
        response = await panel.get("/api/v1/servers/1")

        assert response.status_code == 200
        body = response.json()
        assert body["server"]["id"] == 1
        assert [s["domain"] for s in body["sites"]] == ["shop.io"]
        assert body["sshUrl"] == "ssh://ploi@10.0.0.1:22"
        assert body["panelUrl"].endswith("/servers/1")
        assert [s["key"] for s in body["services"]] == ["mysql", "nginx", "supervisor"]

    async def test_unknown_server_is_404(self, panel):
        response = await panel.get("/api/v1/servers/99")

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "NOT_FOUND"

    async def test_focus_caches_the_site_list(self, fresh_panel):
        api, coordinator, store = fresh_panel

        response = await api.post("/api/v1/servers/1/focus")
        await coordinator.lifetime.drain()

        assert response.status_code == 202
        assert [s.domain for s in load_sites(store.entries[sites_key(1)])] == ["shop.io"]

    async def test_restart_nginx(self, panel):
        response = await panel.post("/api/v1/servers/1/services/nginx/restart")

        assert response.status_code == 200
        body = response.json()
        assert body["ok"] is True
        assert body["notification"]["title"] == "Restarting Nginx..."

    async def test_restart_unknown_service_is_404(self, panel):
        response = await panel.post("/api/v1/servers/1/services/redis/restart")
        assert response.status_code == 404

    async def test_reboot(self, panel):
        response = await panel.post("/api/v1/servers/1/reboot")
        assert response.json()["notification"]["title"] == "Rebooting server..."


class TestSiteEndpoints:
    async def test_list_sites(self, panel):
        response = await panel.get("/api/v1/servers/1/sites")

        assert response.status_code == 200
        assert [s["domain"] for s in response.json()["data"]] == ["shop.io"]

    async def test_list_sites_failure_is_502(self, panel):
        response = await panel.get("/api/v1/servers/3/sites")
        assert response.status_code == 502

    async def test_get_site(self, panel):
        response = await panel.get("/api/v1/servers/1/sites/5")

        assert response.status_code == 200
        assert response.json()["webDirectory"] == "/public"

    async def test_deploy_uses_cached_domain(self, panel):
        response = await panel.post("/api/v1/servers/1/sites/5/deploy")
        assert response.json()["notification"]["title"] == "Deploying shop.io"

    async def test_deploy_after_focus_names_the_domain(self, fresh_panel):
        api, coordinator, _ = fresh_panel

        await api.post("/api/v1/servers/1/focus")
        await coordinator.lifetime.drain()
        response = await api.post("/api/v1/servers/1/sites/5/deploy")

        assert response.json()["notification"]["title"] == "Deploying shop.io"

    async def test_deploy_without_cached_sites_names_the_id(self, fresh_panel):
        api, _, _ = fresh_panel

        response = await api.post("/api/v1/servers/1/sites/5/deploy")

        assert response.json()["notification"]["title"] == "Deploying site 5"

    async def test_flush_shows_rejection(self, panel):
        response = await panel.post("/api/v1/servers/1/sites/5/fastcgi-cache/flush")

        assert response.status_code == 200
        body = response.json()
        assert body["ok"] is False
        assert body["error"] == "resource"
        assert body["notification"]["title"] == "Deploy in progress"


class TestNotifications:
    async def test_recent_notifications_in_order(self, panel):
        await panel.post("/api/v1/servers/1/reboot")
        await panel.post("/api/v1/servers/1/sites/5/fastcgi-cache/flush")

        response = await panel.get("/api/v1/notifications")

        titles = [n["title"] for n in response.json()]
        assert titles == ["Rebooting server...", "Deploy in progress"]
        assert [n["style"] for n in response.json()] == ["success", "failure"]
        assert all("createdAt" in n for n in response.json())
