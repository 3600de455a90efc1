"""Pydantic schemas for notifications, action results and panel responses."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from app.errors import ErrorKind
from app.schemas.server import ServerRecord
from app.schemas.site import SiteRecord


class NotificationStyle(str, Enum):
    SUCCESS = "success"
    FAILURE = "failure"


class Notification(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    style: NotificationStyle
    title: str
    message: str | None = None
    created_at: datetime


class ActionResult(BaseModel):
    """Outcome of a mutating Ploi call. error is None when ok is True."""

    ok: bool
    error: ErrorKind | None = None
    notification: Notification


class ServerListResponse(BaseModel):
    state: str
    loading: bool
    data: list[ServerRecord]


class ServiceAction(BaseModel):
    key: str
    label: str
    title: str


class ServerDetailResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    server: ServerRecord
    sites: list[SiteRecord]
    ssh_url: str
    panel_url: str
    services: list[ServiceAction]


class SiteListResponse(BaseModel):
    data: list[SiteRecord]
