from __future__ import annotations

import pytest
import structlog


def _docker_available() -> bool:
    try:
        import docker

        docker.from_env().ping()
    except Exception:  # noqa: BLE001
        return False
    return True


@pytest.fixture(autouse=True)
def _reset_structlog():
    # The CLI points structlog at the current stderr; don't let that leak into later tests.
    yield
    structlog.reset_defaults()


@pytest.fixture(scope="session")
def postgres_url() -> str:
    if not _docker_available():
        pytest.skip("Docker daemon not reachable")

    from testcontainers.postgres import PostgresContainer

    with PostgresContainer("postgres:16") as pg:
        url = pg.get_connection_url()
        # Normalize testcontainers URL (may be postgresql:// or postgresql+psycopg2://).
        yield url.replace("postgresql+psycopg2://", "postgresql+psycopg://").replace(
            "postgresql://", "postgresql+psycopg://", 1
        )
