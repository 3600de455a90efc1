"""Server list, detail and server action endpoints.

GET  /api/v1/servers                                  — coordinator list (cached, then fresh)
POST /api/v1/servers/{id}/focus                       — schedule site prefetch
GET  /api/v1/servers/{id}                             — detail view with cached sites and links
POST /api/v1/servers/{id}/reboot                      — reboot
POST /api/v1/servers/{id}/services/{service}/restart  — restart MySQL / Nginx / Supervisor
POST /api/v1/servers/{id}/refresh-opcache             — refresh OPcache

Actions answer 200 even when Ploi refuses them; the outcome is in the
returned notification.
"""

from fastapi import APIRouter, Depends, Response

from app.config import settings
from app.dependencies import get_coordinator, get_ploi_client
from app.errors import NotFoundError
from app.ploi.client import SERVICES, PloiClient
from app.ploi.links import panel_url, ssh_url
from app.schemas.panel import ActionResult, ServerDetailResponse, ServerListResponse, ServiceAction
from app.schemas.server import ServerRecord
from app.sync.coordinator import ServerListCoordinator

router = APIRouter(prefix="/api/v1", tags=["servers"])


def _require_server(coordinator: ServerListCoordinator, server_id: int) -> ServerRecord:
    server = coordinator.server(server_id)
    if server is None:
        raise NotFoundError(f"Server '{server_id}' not found")
    return server


@router.get("/servers", response_model=ServerListResponse)
async def list_servers(
    coordinator: ServerListCoordinator = Depends(get_coordinator),
) -> ServerListResponse:
    return ServerListResponse(
        state=coordinator.state.value,
        loading=coordinator.loading,
        data=coordinator.servers,
    )


@router.post("/servers/{server_id}/focus", status_code=202)
async def focus_server(
    server_id: int,
    coordinator: ServerListCoordinator = Depends(get_coordinator),
) -> Response:
    coordinator.focus(server_id)
    return Response(status_code=202)


@router.get("/servers/{server_id}", response_model=ServerDetailResponse)
async def get_server(
    server_id: int,
    coordinator: ServerListCoordinator = Depends(get_coordinator),
) -> ServerDetailResponse:
    server = _require_server(coordinator, server_id)
    return ServerDetailResponse(
        server=server,
        sites=coordinator.sites_for(server_id),
        ssh_url=ssh_url(server, settings.PLOI_SSH_USER),
        panel_url=panel_url(server, settings.PLOI_PANEL_URL),
        services=[
            ServiceAction(key=key, label=label, title=f"Restart {label}")
            for key, label in SERVICES.items()
        ],
    )


@router.post("/servers/{server_id}/reboot", response_model=ActionResult)
async def reboot_server(
    server_id: int,
    client: PloiClient = Depends(get_ploi_client),
) -> ActionResult:
    return await client.reboot_server(server_id)


@router.post("/servers/{server_id}/services/{service}/restart", response_model=ActionResult)
async def restart_service(
    server_id: int,
    service: str,
    client: PloiClient = Depends(get_ploi_client),
) -> ActionResult:
    return await client.restart_service(server_id, service)


@router.post("/servers/{server_id}/refresh-opcache", response_model=ActionResult)
async def refresh_opcache(
    server_id: int,
    client: PloiClient = Depends(get_ploi_client),
) -> ActionResult:
    return await client.refresh_opcache(server_id)
