"""Key-value cache for the last fetched server and site lists.

CacheStore is an ABC so the coordinator can be tested against an in-memory
map. SqlCacheStore keeps every entry in the cache_entries table; each call
opens its own session and commits before returning, so a set() is visible
to the next get() of the same key.

Keys are opaque here. The coordinator builds them with servers_key() and
sites_key().
"""

import json
from abc import ABC, abstractmethod

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import sessionmaker

from app.models.cache_entry import CacheEntry
from app.schemas.server import ServerRecord
from app.schemas.site import SiteRecord

SERVERS_KEY = "ploi-servers"
SITES_KEY_PREFIX = "ploi-sites-"


def servers_key() -> str:
    return SERVERS_KEY


def sites_key(server_id: int | str) -> str:
    return f"{SITES_KEY_PREFIX}{server_id}"


def dump_records(records: list[ServerRecord] | list[SiteRecord]) -> str:
    """Serialize records with their camelCase keys."""
    return json.dumps([record.model_dump(by_alias=True) for record in records])


def load_servers(value: str) -> list[ServerRecord]:
    return [ServerRecord.model_validate(item) for item in json.loads(value)]


def load_sites(value: str) -> list[SiteRecord]:
    return [SiteRecord.model_validate(item) for item in json.loads(value)]


class CacheStore(ABC):
    @abstractmethod
    async def get(self, key: str) -> str | None: ...

    @abstractmethod
    async def set(self, key: str, value: str) -> None: ...

    @abstractmethod
    async def get_all(self) -> dict[str, str]: ...


class SqlCacheStore(CacheStore):
    def __init__(self, session_factory: sessionmaker[AsyncSession]) -> None:  # type: ignore[type-arg]
        self._session_factory = session_factory

    async def get(self, key: str) -> str | None:
        async with self._session_factory() as session:
            entry = await session.get(CacheEntry, key)
            return entry.value if entry is not None else None

    async def set(self, key: str, value: str) -> None:
        async with self._session_factory() as session:
            entry = await session.get(CacheEntry, key)
            if entry is None:
                session.add(CacheEntry(key=key, value=value))
            else:
                entry.value = value
            await session.commit()

    async def get_all(self) -> dict[str, str]:
        async with self._session_factory() as session:
            rows = await session.execute(select(CacheEntry.key, CacheEntry.value))
            return {key: value for key, value in rows.all()}
