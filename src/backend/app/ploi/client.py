"""Ploi API client.

PloiClient wraps an httpx.AsyncClient that already carries the base URL,
bearer token and timeout (see build_http_client). Every call:
  1. sends the request through _send(), which raises AuthError,
     ResourceError or NetworkError
  2. catches that error at this boundary, logs it and reports it to the
     Notifier exactly once
  3. returns the records (reads) or an ActionResult (actions)

Callers never see a raised PanelError from a Ploi call. A failed read comes
back as None, which callers cannot tell apart from "nothing fetched yet".
"""

import logging
from collections.abc import Callable
from typing import TypeVar

import httpx
from pydantic import ValidationError

from app.config import AppSettings
from app.errors import AuthError, NetworkError, NotFoundError, PanelError, ResourceError
from app.ploi.notifier import Notifier
from app.schemas.panel import ActionResult
from app.schemas.server import ServerRecord, normalize_server, sort_servers
from app.schemas.site import SiteRecord, normalize_site, sort_sites

log = logging.getLogger(__name__)

R = TypeVar("R")

# Service key → label shown in notifications
SERVICES: dict[str, str] = {
    "mysql": "MySQL",
    "nginx": "Nginx",
    "supervisor": "Supervisor",
}

INVALID_KEY_TITLE = "Wrong API key used"
INVALID_KEY_MESSAGE = "Please remove your API key in the preferences and enter a valid one"


def build_http_client(settings: AppSettings) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        base_url=settings.PLOI_API_URL,
        headers={
            "Authorization": f"Bearer {settings.PLOI_API_KEY}",
            "Accept": "application/json",
            "Content-Type": "application/json",
        },
        timeout=settings.PLOI_API_TIMEOUT_SECONDS,
    )


def _rejection_message(response: httpx.Response) -> str | None:
    """Return errors[0] from a 422 body, or None if there is none to show."""
    if response.status_code != 422:
        return None
    try:
        body = response.json()
    except ValueError:
        return None
    errors = body.get("errors") if isinstance(body, dict) else None
    if isinstance(errors, list) and errors and errors[0]:
        return str(errors[0])
    return None


def _build(items: object, normalize: Callable[[dict], R]) -> list[R]:
    if not isinstance(items, list):
        raise NetworkError("Expected a list in response data")
    try:
        return [normalize(item) for item in items]
    except (ValidationError, AttributeError) as exc:
        raise NetworkError(f"Malformed record in response: {exc}") from exc


class PloiClient:
    def __init__(self, http_client: httpx.AsyncClient, notifier: Notifier) -> None:
        self._client = http_client
        self._notifier = notifier

    # ── transport ─────────────────────────────────────────────────────────

    async def _send(self, method: str, path: str, *, read: bool) -> httpx.Response:
        try:
            response = await self._client.request(method, path)
        except httpx.HTTPError as exc:
            raise NetworkError(f"{method} {path} failed: {exc!r}") from exc

        if response.is_success:
            return response

        rejection = _rejection_message(response)
        if rejection is not None:
            # On reads Ploi only answers 422 with errors for a bad API key
            if read:
                raise AuthError(rejection)
            raise ResourceError(rejection)
        raise NetworkError(f"{method} {path} returned {response.status_code}")

    async def _get_data(self, path: str) -> object:
        response = await self._send("GET", path, read=True)
        try:
            body = response.json()
        except ValueError as exc:
            raise NetworkError(f"GET {path} returned a non-JSON body") from exc
        if not isinstance(body, dict):
            raise NetworkError(f"GET {path} returned an unexpected envelope")
        return body.get("data")

    async def _read_failed(self, exc: PanelError, title: str) -> None:
        log.warning("Ploi read failed (%s): %s", exc.code, exc.message)
        if isinstance(exc, AuthError):
            await self._notifier.failure(INVALID_KEY_TITLE, INVALID_KEY_MESSAGE)
        else:
            await self._notifier.failure(title)

    async def _act(
        self,
        path: str,
        success_title: str,
        failure_title: str,
        *,
        show_rejection: bool = False,
    ) -> ActionResult:
        try:
            await self._send("POST", path, read=False)
        except PanelError as exc:
            log.warning("Ploi action POST %s failed (%s): %s", path, exc.code, exc.message)
            title = failure_title
            if show_rejection and isinstance(exc, ResourceError):
                title = exc.message
            notification = await self._notifier.failure(title)
            return ActionResult(ok=False, error=exc.kind, notification=notification)

        notification = await self._notifier.success(success_title)
        return ActionResult(ok=True, notification=notification)

    # ── servers ───────────────────────────────────────────────────────────

    async def list_servers(self) -> list[ServerRecord] | None:
        """All servers on the account, sorted by name ignoring case."""
        try:
            data = await self._get_data("/servers")
            servers = _build(data if data is not None else [], normalize_server)
        except PanelError as exc:
            await self._read_failed(exc, "Failed to load servers")
            return None
        return sort_servers(servers)

    async def reboot_server(self, server_id: int, label: str = "server") -> ActionResult:
        return await self._act(
            f"/servers/{server_id}/restart",
            f"Rebooting {label}...",
            f"Failed to reboot {label}",
        )

    async def restart_service(
        self, server_id: int, service: str, label: str | None = None
    ) -> ActionResult:
        """Restart one of SERVICES on the server.

        Raises NotFoundError for a service key outside SERVICES; no request
        is made in that case.
        """
        if service not in SERVICES:
            raise NotFoundError(f"Unknown service '{service}'")
        label = label or SERVICES[service]
        return await self._act(
            f"/servers/{server_id}/services/{service}/restart",
            f"Restarting {label}...",
            f"Failed to restart {label}",
        )

    async def refresh_opcache(self, server_id: int) -> ActionResult:
        return await self._act(
            f"/servers/{server_id}/refresh-opcache",
            "Refreshing OPcache...",
            "Failed to refresh OPcache",
            show_rejection=True,
        )

    # ── sites ─────────────────────────────────────────────────────────────

    async def list_sites(self, server_id: int) -> list[SiteRecord] | None:
        try:
            data = await self._get_data(f"/servers/{server_id}/sites")
            sites = _build(data if data is not None else [], normalize_site)
        except PanelError as exc:
            await self._read_failed(exc, "Failed to load sites")
            return None
        return sort_sites(sites)

    async def get_site(self, server_id: int, site_id: int) -> SiteRecord | None:
        try:
            data = await self._get_data(f"/servers/{server_id}/sites/{site_id}")
            if not isinstance(data, dict):
                raise NetworkError("Expected an object in response data")
            site = _build([data], normalize_site)[0]
        except PanelError as exc:
            await self._read_failed(exc, "Failed to load site")
            return None
        return site

    async def deploy_site(
        self, site_id: int, server_id: int, domain: str | None = None
    ) -> ActionResult:
        domain = domain or f"site {site_id}"
        return await self._act(
            f"/servers/{server_id}/sites/{site_id}/deploy",
            f"Deploying {domain}",
            f"Failed to deploy {domain}",
        )

    async def flush_fastcgi_cache(self, site_id: int, server_id: int) -> ActionResult:
        return await self._act(
            f"/servers/{server_id}/sites/{site_id}/fastcgi-cache/flush",
            "Flushing FastCGI Cache",
            "Failed to flush FastCGI Cache",
            show_rejection=True,
        )
