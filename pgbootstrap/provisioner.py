from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import asdict, dataclass, field
from typing import Any

from pgbootstrap.access import AccessReport, ensure_database_and_role
from pgbootstrap.connection import ConnectionInfo, connect_commands, persist_connection_info
from pgbootstrap.engine import EngineHandle, locate_engine
from pgbootstrap.logging import logger
from pgbootstrap.runner import CommandRunner
from pgbootstrap.schema import apply_schema
from pgbootstrap.seed import seed_data
from pgbootstrap.server import ServerState, ensure_running
from pgbootstrap.settings import ProvisionerSettings
from pgbootstrap.sql import SqlExecutor, StatementReport, connect_executor


ExecutorFactory = Callable[[ProvisionerSettings, CommandRunner, EngineHandle], SqlExecutor]


@dataclass
class ProvisionReport:
    engine_version: str
    server_state: ServerState
    access: AccessReport
    connection: ConnectionInfo
    schema: StatementReport
    seed: StatementReport
    connect_commands: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.access.ok and self.schema.ok and self.seed.ok

    def to_dict(self) -> dict[str, Any]:
        out = asdict(self)
        out["server_state"] = self.server_state.value
        out["ok"] = self.ok
        return out


class Provisioner:
    """
    Converges a local PostgreSQL instance to the baseline state.

    Only a missing engine or a server that never becomes ready abort the run;
    every other failure is recorded in the report and the run continues.
    """

    def __init__(
        self,
        settings: ProvisionerSettings,
        runner: CommandRunner,
        *,
        sleep: Callable[[float], None] = time.sleep,
        executor_factory: ExecutorFactory | None = None,
    ):
        self._settings = settings
        self._runner = runner
        self._sleep = sleep
        self._executor_factory = executor_factory or connect_executor

    def run(self) -> ProvisionReport:
        s = self._settings
        logger.info("provision_started", database=s.db_name, user=s.db_user, port=s.db_port)

        handle = locate_engine(s.pg_root, s.os_user or None)
        state = ensure_running(self._runner, handle, s, sleep=self._sleep)
        access = ensure_database_and_role(self._runner, handle, s)
        connection = persist_connection_info(s)

        executor = self._executor_factory(s, self._runner, handle)
        try:
            schema = apply_schema(executor)
            seed = seed_data(executor)
        finally:
            executor.close()

        report = ProvisionReport(
            engine_version=handle.version,
            server_state=state,
            access=access,
            connection=connection,
            schema=schema,
            seed=seed,
            connect_commands=connect_commands(s),
        )
        logger.info("provision_finished", ok=report.ok, server_state=state.value)
        return report
