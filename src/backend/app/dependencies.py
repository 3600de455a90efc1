"""FastAPI dependencies resolving the objects built in main.lifespan."""

from fastapi import Request

from app.ploi.client import PloiClient
from app.ploi.notifier import MemoryNotifier
from app.sync.coordinator import ServerListCoordinator


def get_coordinator(request: Request) -> ServerListCoordinator:
    return request.app.state.coordinator


def get_ploi_client(request: Request) -> PloiClient:
    return request.app.state.ploi_client


def get_notifier(request: Request) -> MemoryNotifier:
    return request.app.state.notifier
