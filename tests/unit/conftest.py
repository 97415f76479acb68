from __future__ import annotations

from pathlib import Path

import pytest

from pgbootstrap.engine import EngineHandle
from pgbootstrap.settings import ProvisionerSettings
from tests.fakes import FakeRunner, make_pg_root


@pytest.fixture()
def settings(tmp_path: Path) -> ProvisionerSettings:
    return ProvisionerSettings(
        db_name="myapp",
        db_user="appuser",
        db_password="dbuser123",
        db_host="localhost",
        db_port=5000,
        data_dir=tmp_path / "data",
        pg_root=make_pg_root(tmp_path / "pg", "16"),
        os_user="",
        connection_file=tmp_path / "db_connection.txt",
        env_export_file=tmp_path / "db_visualizer" / "postgres.env",
        server_log_file=tmp_path / "postgres.log",
        ready_attempts=3,
        ready_interval_s=0.25,
        log_level="info",
    )


@pytest.fixture()
def handle() -> EngineHandle:
    return EngineHandle(version="16", bin_dir=Path("/usr/lib/postgresql/16/bin"))


@pytest.fixture()
def runner() -> FakeRunner:
    return FakeRunner()
