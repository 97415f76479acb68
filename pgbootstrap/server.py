from __future__ import annotations

import time
from collections.abc import Callable
from enum import Enum
from pathlib import Path

from pgbootstrap.engine import EngineHandle
from pgbootstrap.errors import StartFailed
from pgbootstrap.logging import logger
from pgbootstrap.runner import CommandRunner
from pgbootstrap.settings import ProvisionerSettings


class ServerState(str, Enum):
    ALREADY_RUNNING = "already_running"
    # A server process existed but was not accepting connections yet.
    ADOPTED = "adopted"
    STARTED = "started"


def is_ready(runner: CommandRunner, handle: EngineHandle, port: int) -> bool:
    return runner.run(handle.command("pg_isready", "-p", port)).ok


def server_process_pattern(port: int) -> str:
    # Anchored so port 500 does not match a server on 5000.
    return f"postgres.*-p {port}( |$)"


def server_process_exists(runner: CommandRunner, port: int) -> bool:
    return runner.run(["pgrep", "-f", server_process_pattern(port)]).ok


def data_dir_initialized(runner: CommandRunner, handle: EngineHandle, data_dir: Path) -> bool:
    # Checked as the engine user: the data dir is normally 0700 and owned by it.
    return runner.run(handle.as_engine_user("test", "-f", data_dir / "PG_VERSION")).ok


def wait_until_ready(
    runner: CommandRunner,
    handle: EngineHandle,
    port: int,
    *,
    attempts: int,
    interval_s: float,
    sleep: Callable[[float], None] = time.sleep,
) -> bool:
    for attempt in range(1, attempts + 1):
        if is_ready(runner, handle, port):
            logger.info("server_ready", port=port, attempt=attempt)
            return True
        logger.info("server_waiting", port=port, attempt=attempt, attempts=attempts)
        if attempt < attempts:
            sleep(interval_s)
    return False


def ensure_running(
    runner: CommandRunner,
    handle: EngineHandle,
    settings: ProvisionerSettings,
    *,
    sleep: Callable[[float], None] = time.sleep,
) -> ServerState:
    port = settings.db_port
    if is_ready(runner, handle, port):
        logger.info("server_already_running", port=port)
        return ServerState.ALREADY_RUNNING

    # Readiness is the only success signal; the process probe only prevents a second start.
    if server_process_exists(runner, port):
        logger.info("server_process_found", port=port)
        state = ServerState.ADOPTED
    else:
        if not data_dir_initialized(runner, handle, settings.data_dir):
            logger.info("data_dir_initializing", data_dir=str(settings.data_dir))
            result = runner.run(handle.command("initdb", "-D", settings.data_dir))
            if not result.ok:
                logger.error("initdb_failed", returncode=result.returncode, stderr=result.stderr.strip())
                raise StartFailed(f"initdb failed for {settings.data_dir}: {result.stderr.strip()}")

        logger.info("server_starting", port=port, data_dir=str(settings.data_dir))
        try:
            runner.spawn(
                handle.command("postgres", "-D", settings.data_dir, "-p", port),
                log_path=settings.server_log_file,
            )
        except OSError as e:
            logger.error("server_spawn_failed", error=str(e), log_path=str(settings.server_log_file))
            raise StartFailed(f"could not start server on port {port}: {e}") from e
        state = ServerState.STARTED

    if not wait_until_ready(
        runner,
        handle,
        port,
        attempts=settings.ready_attempts,
        interval_s=settings.ready_interval_s,
        sleep=sleep,
    ):
        logger.error("server_start_timeout", port=port, attempts=settings.ready_attempts)
        raise StartFailed(f"server on port {port} not ready after {settings.ready_attempts} attempts")
    return state
