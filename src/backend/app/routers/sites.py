"""Site endpoints for one server.

GET  /api/v1/servers/{id}/sites                              — live list from Ploi
GET  /api/v1/servers/{id}/sites/{site_id}                    — live site
POST /api/v1/servers/{id}/sites/{site_id}/deploy             — deploy
POST /api/v1/servers/{id}/sites/{site_id}/fastcgi-cache/flush — flush FastCGI cache
"""

from fastapi import APIRouter, Depends

from app.dependencies import get_coordinator, get_ploi_client
from app.errors import NetworkError
from app.ploi.client import PloiClient
from app.schemas.panel import ActionResult, SiteListResponse
from app.schemas.site import SiteRecord
from app.sync.coordinator import ServerListCoordinator

router = APIRouter(prefix="/api/v1/servers/{server_id}/sites", tags=["sites"])


@router.get("", response_model=SiteListResponse)
async def list_sites(
    server_id: int,
    client: PloiClient = Depends(get_ploi_client),
) -> SiteListResponse:
    sites = await client.list_sites(server_id)
    if sites is None:
        raise NetworkError("Failed to load sites")
    return SiteListResponse(data=sites)


@router.get("/{site_id}", response_model=SiteRecord)
async def get_site(
    server_id: int,
    site_id: int,
    client: PloiClient = Depends(get_ploi_client),
) -> SiteRecord:
    site = await client.get_site(server_id, site_id)
    if site is None:
        raise NetworkError("Failed to load site")
    return site


@router.post("/{site_id}/deploy", response_model=ActionResult)
async def deploy_site(
    server_id: int,
    site_id: int,
    client: PloiClient = Depends(get_ploi_client),
    coordinator: ServerListCoordinator = Depends(get_coordinator),
) -> ActionResult:
    # Domain comes from the cached site list, prefetched ones included
    sites = await coordinator.stored_sites(server_id)
    cached = next((s for s in sites if s.id == site_id), None)
    domain = cached.domain if cached is not None else None
    return await client.deploy_site(site_id, server_id, domain=domain)


@router.post("/{site_id}/fastcgi-cache/flush", response_model=ActionResult)
async def flush_fastcgi_cache(
    server_id: int,
    site_id: int,
    client: PloiClient = Depends(get_ploi_client),
) -> ActionResult:
    return await client.flush_fastcgi_cache(site_id, server_id)
