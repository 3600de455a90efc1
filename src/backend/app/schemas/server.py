"""Pydantic schemas for the Ploi server domain.

The Ploi API sends snake_case keys. SERVER_FIELDS is the explicit mapping to
the camelCase convention used everywhere else (cache payloads, panel API);
keys not listed are dropped.
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

SERVER_FIELDS: dict[str, str] = {
    "id": "id",
    "type": "type",
    "name": "name",
    "ip_address": "ipAddress",
    "internal_ip": "internalIp",
    "php_version": "phpVersion",
    "mysql_version": "mysqlVersion",
    "sites_count": "sitesCount",
    "status": "status",
    "status_id": "statusId",
    "created_at": "createdAt",
    "php_cli_version": "phpCliVersion",
    "ssh_port": "sshPort",
    "database_type": "databaseType",
    "opcache": "opcache",
}


class ServerRecord(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, coerce_numbers_to_str=True
    )

    id: int
    name: str
    type: str | None = None
    ip_address: str | None = None
    internal_ip: str | None = None
    php_version: str | None = None
    mysql_version: str | None = None
    sites_count: int = 0
    status: str | None = None
    status_id: int | None = None
    created_at: str | None = None
    php_cli_version: str | None = None
    ssh_port: int = 22
    database_type: str | None = None
    opcache: bool = False


def normalize_server(raw: dict) -> ServerRecord:
    """Build a ServerRecord from one item of the Ploi /servers payload."""
    mapped = {SERVER_FIELDS[key]: value for key, value in raw.items() if key in SERVER_FIELDS}
    return ServerRecord.model_validate(mapped)


def sort_servers(servers: list[ServerRecord]) -> list[ServerRecord]:
    return sorted(servers, key=lambda s: s.name.lower())
