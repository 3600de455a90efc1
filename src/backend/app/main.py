"""Ploi panel FastAPI application.

Entry point: uvicorn app.main:app

The lifespan builds one httpx client, Notifier, PloiClient and
ServerListCoordinator for the process, hydrates the server list from the
cache and starts the first refresh in the background.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from app.cache.store import SqlCacheStore
from app.config import settings
from app.database import AsyncSessionLocal, async_engine
from app.errors import PanelError
from app.middleware import RequestIDMiddleware, configure_logging, get_request_id
from app.ploi.client import PloiClient, build_http_client
from app.ploi.notifier import MemoryNotifier
from app.routers import health, notifications, servers, sites
from app.sync.coordinator import ServerListCoordinator


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    configure_logging(settings.LOG_LEVEL)
    http_client = build_http_client(settings)
    notifier = MemoryNotifier(history=settings.NOTIFICATION_HISTORY)
    client = PloiClient(http_client, notifier)
    coordinator = ServerListCoordinator(client, SqlCacheStore(AsyncSessionLocal))

    app.state.notifier = notifier
    app.state.ploi_client = client
    app.state.coordinator = coordinator
    await coordinator.start()

    yield

    coordinator.close()
    await coordinator.lifetime.drain()
    await http_client.aclose()
    await async_engine.dispose()


app = FastAPI(title="Ploi panel", lifespan=lifespan)

app.add_middleware(RequestIDMiddleware)


@app.exception_handler(PanelError)
async def panel_error_handler(request: Request, exc: PanelError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": {
                "code": exc.code,
                "message": exc.message,
                "request_id": get_request_id(),
            }
        },
        headers={"X-Request-ID": get_request_id()},
    )


app.include_router(health.router)
app.include_router(servers.router)
app.include_router(sites.router)
app.include_router(notifications.router)
