from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class ProvisionerSettings(BaseSettings):
    model_config = SettingsConfigDict(extra="forbid")

    db_name: str = "myapp"
    db_user: str = "appuser"
    db_password: str = "dbuser123"
    db_host: str = "localhost"
    db_port: int = 5000

    data_dir: Path = Path("/var/lib/postgresql/data")
    pg_root: Path = Path("/usr/lib/postgresql")
    # Admin binaries run as this account (via sudo unless we already are it). Empty disables sudo.
    os_user: str = "postgres"

    connection_file: Path = Path("db_connection.txt")
    env_export_file: Path = Path("db_visualizer/postgres.env")
    server_log_file: Path = Path("postgres.log")

    # Readiness polling
    ready_attempts: int = 20
    ready_interval_s: float = 1.0

    log_level: str = "info"


SETTINGS = ProvisionerSettings()
