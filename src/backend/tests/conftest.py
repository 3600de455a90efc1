"""Shared fixtures: test settings, a recording Notifier, an in-memory cache
and a PloiClient whose transport is an httpx.MockTransport handler."""

import os

os.environ.setdefault("PLOI_API_KEY", "test-api-key")
os.environ.setdefault("CACHE_DB_URL", "sqlite+aiosqlite:///:memory:")

from collections.abc import Callable  # noqa: E402

import httpx  # noqa: E402
import pytest  # noqa: E402

from app.cache.store import CacheStore  # noqa: E402
from app.ploi.client import PloiClient  # noqa: E402
from app.ploi.notifier import Notifier  # noqa: E402
from app.schemas.panel import Notification  # noqa: E402

API_URL = "https://ploi.test/api"


class RecordingNotifier(Notifier):
    def __init__(self) -> None:
        self.sent: list[Notification] = []

    async def notify(self, notification: Notification) -> None:
        self.sent.append(notification)

    @property
    def titles(self) -> list[str]:
        return [n.title for n in self.sent]


class MemoryCacheStore(CacheStore):
    def __init__(self, entries: dict[str, str] | None = None) -> None:
        self.entries = dict(entries or {})
        self.writes: list[str] = []

    async def get(self, key: str) -> str | None:
        return self.entries.get(key)

    async def set(self, key: str, value: str) -> None:
        self.writes.append(key)
        self.entries[key] = value

    async def get_all(self) -> dict[str, str]:
        return dict(self.entries)


def raw_server(server_id: int, name: str, **extra) -> dict:
    """A server object as the Ploi API sends it (snake_case keys)."""
    data = {
        "id": server_id,
        "type": "server",
        "name": name,
        "ip_address": f"10.0.0.{server_id}",
        "internal_ip": f"192.168.0.{server_id}",
        "php_version": "8.2",
        "mysql_version": "8.0",
        "sites_count": 2,
        "status": "Active",
        "status_id": 2,
        "created_at": "2024-01-05 10:00:00",
        "php_cli_version": "8.2",
        "ssh_port": 22,
        "database_type": "mysql",
        "opcache": True,
    }
    data.update(extra)
    return data


def raw_site(site_id: int, domain: str, **extra) -> dict:
    data = {
        "id": site_id,
        "domain": domain,
        "status": "active",
        "server_id": 1,
        "web_directory": "/public",
        "project_type": "laravel",
        "system_user": "ploi",
        "php_version": "8.2",
        "has_repository": True,
        "created_at": "2024-01-05 10:00:00",
    }
    data.update(extra)
    return data


Handler = Callable[[httpx.Request], httpx.Response]


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
async def make_client(notifier):
    """Build a PloiClient whose requests are answered by handler.

    Every request seen is appended to the returned client's `requests` list.
    """
    clients: list[httpx.AsyncClient] = []

    def _make(handler: Handler) -> PloiClient:
        seen: list[httpx.Request] = []

        def _record(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return handler(request)

        http_client = httpx.AsyncClient(base_url=API_URL, transport=httpx.MockTransport(_record))
        clients.append(http_client)
        client = PloiClient(http_client, notifier)
        client.requests = seen  # type: ignore[attr-defined]
        return client

    yield _make

    for http_client in clients:
        await http_client.aclose()
