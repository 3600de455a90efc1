"""Links shown in the server detail view."""

from app.schemas.server import ServerRecord


def ssh_url(server: ServerRecord, user: str) -> str:
    return f"ssh://{user}@{server.ip_address}:{server.ssh_port}"


def panel_url(server: ServerRecord, panel_base: str) -> str:
    return f"{panel_base.rstrip('/')}/servers/{server.id}"
