"""Pydantic schemas for the Ploi site domain.

SITE_FIELDS maps the site keys the panel knows about. Other keys Ploi sends
are kept on the record as extras, renamed to camelCase, but nothing reads
them.
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

SITE_FIELDS: dict[str, str] = {
    "id": "id",
    "domain": "domain",
    "status": "status",
    "server_id": "serverId",
    "deploy_script": "deployScript",
    "web_directory": "webDirectory",
    "project_type": "projectType",
    "project_root": "projectRoot",
    "last_deploy_at": "lastDeployAt",
    "system_user": "systemUser",
    "php_version": "phpVersion",
    "health_url": "healthUrl",
    "has_repository": "hasRepository",
    "created_at": "createdAt",
}


class SiteRecord(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, coerce_numbers_to_str=True, extra="allow"
    )

    id: int
    domain: str
    status: str | None = None
    server_id: int | None = None
    deploy_script: bool | str | None = None
    web_directory: str | None = None
    project_type: str | None = None
    project_root: str | None = None
    last_deploy_at: str | None = None
    system_user: str | None = None
    php_version: str | None = None
    health_url: str | None = None
    has_repository: bool | None = None
    created_at: str | None = None


def normalize_site(raw: dict) -> SiteRecord:
    """Build a SiteRecord from one Ploi site object."""
    mapped = {SITE_FIELDS.get(key) or to_camel(key): value for key, value in raw.items()}
    return SiteRecord.model_validate(mapped)


def sort_sites(sites: list[SiteRecord]) -> list[SiteRecord]:
    return sorted(sites, key=lambda s: s.domain)
