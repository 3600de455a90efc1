"""Server list coordinator: cache hydration, network refresh, site prefetch.

Startup order:
  1. read every cache entry once; pop "ploi-servers", keep the rest as the
     per-server site snapshot
  2. publish the cached server list straight away (possibly empty)
  3. fetch the list from Ploi; on success publish it and write it back

Site lists are prefetched when a server gains focus and written to the
cache only. The snapshot shown by sites_for() is the one read at startup,
so a prefetched list becomes visible after the next start(). Site entries
are never rewritten once present.
"""

import logging
from collections.abc import Callable
from enum import Enum

from pydantic import ValidationError

from app.cache.store import (
    CacheStore,
    dump_records,
    load_servers,
    load_sites,
    servers_key,
    sites_key,
)
from app.ploi.client import PloiClient
from app.schemas.server import ServerRecord
from app.schemas.site import SiteRecord
from app.sync.lifetime import Lifetime

log = logging.getLogger(__name__)

Listener = Callable[[list[ServerRecord]], None]


def _parse_sites(value: str | None, server_id: int) -> list[SiteRecord]:
    if not value:
        return []
    try:
        return load_sites(value)
    except (ValueError, ValidationError):
        log.warning("Ignoring corrupt site cache for server %s", server_id)
        return []


class ListState(str, Enum):
    EMPTY = "empty"
    HYDRATED = "hydrated"
    READY = "ready"


class ServerListCoordinator:
    def __init__(
        self,
        client: PloiClient,
        store: CacheStore,
        lifetime: Lifetime | None = None,
    ) -> None:
        self._client = client
        self._store = store
        self.lifetime = lifetime or Lifetime()
        self._servers: list[ServerRecord] = []
        self._state = ListState.EMPTY
        self._site_snapshot: dict[str, str] = {}
        self._known_site_keys: set[str] = set()
        self._pending_site_keys: set[str] = set()
        self._listeners: list[Listener] = []

    # ── state ─────────────────────────────────────────────────────────────

    @property
    def servers(self) -> list[ServerRecord]:
        return list(self._servers)

    @property
    def state(self) -> ListState:
        return self._state

    @property
    def loading(self) -> bool:
        return not self._servers

    def server(self, server_id: int) -> ServerRecord | None:
        return next((s for s in self._servers if s.id == server_id), None)

    def sites_for(self, server_id: int) -> list[SiteRecord]:
        return _parse_sites(self._site_snapshot.get(sites_key(server_id)), server_id)

    async def stored_sites(self, server_id: int) -> list[SiteRecord]:
        """Sites as currently cached, including lists written by a prefetch.

        Falls back to the startup snapshot when the store has nothing usable.
        """
        try:
            value = await self._store.get(sites_key(server_id))
        except Exception:
            log.warning("Could not read site cache for server %s", server_id, exc_info=True)
            value = None
        return _parse_sites(value, server_id) or self.sites_for(server_id)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _publish(self, servers: list[ServerRecord], state: ListState) -> None:
        self._servers = servers
        self._state = state
        for listener in list(self._listeners):
            listener(self.servers)

    async def _write(self, key: str, value: str) -> bool:
        try:
            await self._store.set(key, value)
        except Exception:
            log.warning("Could not write cache entry %s", key, exc_info=True)
            return False
        return True

    # ── lifecycle ─────────────────────────────────────────────────────────

    async def start(self):
        """Hydrate from the cache, then refresh from Ploi in the background.

        Returns the refresh task, or None if the lifetime was cancelled
        while hydrating.
        """
        await self.hydrate()
        if self.lifetime.cancelled:
            return None
        return self.lifetime.spawn(self.refresh())

    async def hydrate(self) -> None:
        try:
            entries = await self._store.get_all()
        except Exception:
            log.warning("Could not read the list cache, starting empty", exc_info=True)
            entries = {}
        if self.lifetime.cancelled:
            return

        cached = entries.pop(servers_key(), None)
        self._site_snapshot = entries
        self._known_site_keys = set(entries)

        servers: list[ServerRecord] = []
        if cached:
            try:
                servers = load_servers(cached)
            except (ValueError, ValidationError):
                log.warning("Ignoring corrupt server list cache")
        self._publish(servers, ListState.HYDRATED)
        log.debug("Hydrated %d servers and %d site lists from cache", len(servers), len(entries))

    async def refresh(self) -> list[ServerRecord] | None:
        """Replace the list with Ploi's and write it through to the cache.

        A failed fetch leaves the current list and state untouched.
        """
        servers = await self._client.list_servers()
        if self.lifetime.cancelled:
            log.debug("Dropping server list refresh, coordinator closed")
            return None
        if servers is None:
            return None

        self._publish(servers, ListState.READY)
        await self._write(servers_key(), dump_records(servers))
        log.info("Refreshed %d servers", len(servers))
        return servers

    async def prefetch_sites(self, server_id: int) -> list[SiteRecord] | None:
        """Fetch and cache a server's sites unless they are cached already."""
        key = sites_key(server_id)
        if key in self._known_site_keys or key in self._pending_site_keys:
            return None
        if self.lifetime.cancelled:
            return None
        server = self.server(server_id)
        if server is None:
            return None

        self._pending_site_keys.add(key)
        try:
            sites = await self._client.list_sites(server.id)
        finally:
            self._pending_site_keys.discard(key)
        if self.lifetime.cancelled or sites is None:
            return None

        if await self._write(key, dump_records(sites)):
            self._known_site_keys.add(key)
        return sites

    def focus(self, server_id: int):
        """Schedule prefetch_sites() for a newly focused server."""
        return self.lifetime.spawn(self.prefetch_sites(server_id))

    def close(self) -> None:
        self.lifetime.cancel()
