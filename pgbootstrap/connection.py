from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from sqlalchemy.engine import URL

from pgbootstrap.logging import logger
from pgbootstrap.settings import ProvisionerSettings


CLIENT_PREFIX = "psql "


@dataclass(frozen=True)
class ConnectionInfo:
    connection_file: str
    env_export_file: str
    client_command: str


def database_url(settings: ProvisionerSettings, *, with_credentials: bool = True) -> str:
    url = URL.create(
        "postgresql",
        username=settings.db_user if with_credentials else None,
        password=settings.db_password if with_credentials else None,
        host=settings.db_host,
        port=settings.db_port,
        database=settings.db_name,
    )
    return url.render_as_string(hide_password=False)


def connect_commands(settings: ProvisionerSettings) -> list[str]:
    return [
        f"psql -h {settings.db_host} -U {settings.db_user} -d {settings.db_name} -p {settings.db_port}",
        f"{CLIENT_PREFIX}{database_url(settings)}",
    ]


def _env_exports(settings: ProvisionerSettings) -> str:
    values = {
        "POSTGRES_URL": database_url(settings, with_credentials=False),
        "POSTGRES_USER": settings.db_user,
        "POSTGRES_PASSWORD": settings.db_password,
        "POSTGRES_DB": settings.db_name,
        "POSTGRES_PORT": str(settings.db_port),
    }
    lines = []
    for key, value in values.items():
        escaped = value.replace("\\", "\\\\").replace('"', '\\"').replace("$", "\\$").replace("`", "\\`")
        lines.append(f'export {key}="{escaped}"')
    return "\n".join(lines) + "\n"


def persist_connection_info(settings: ProvisionerSettings) -> ConnectionInfo:
    client_command = f"{CLIENT_PREFIX}{database_url(settings)}"

    settings.connection_file.parent.mkdir(parents=True, exist_ok=True)
    settings.connection_file.write_text(client_command + "\n", encoding="utf-8")
    logger.info("connection_file_written", path=str(settings.connection_file))

    settings.env_export_file.parent.mkdir(parents=True, exist_ok=True)
    settings.env_export_file.write_text(_env_exports(settings), encoding="utf-8")
    logger.info("env_file_written", path=str(settings.env_export_file))

    return ConnectionInfo(
        connection_file=str(settings.connection_file),
        env_export_file=str(settings.env_export_file),
        client_command=client_command,
    )


def read_connection_url(path: Path) -> str | None:
    """Return the database URL from a connection file, or None if there is nothing usable."""
    try:
        text = path.read_text(encoding="utf-8").strip()
    except FileNotFoundError:
        return None
    if text.startswith(CLIENT_PREFIX):
        text = text[len(CLIENT_PREFIX) :].strip()
    if not text.startswith("postgresql"):
        return None
    return text
