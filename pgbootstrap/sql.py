from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Protocol

import sqlalchemy as sa
from sqlalchemy.engine import make_url
from sqlalchemy.exc import DBAPIError
from sqlalchemy.pool import NullPool

from pgbootstrap.connection import read_connection_url
from pgbootstrap.engine import EngineHandle
from pgbootstrap.errors import StatementError
from pgbootstrap.logging import logger
from pgbootstrap.runner import CommandRunner
from pgbootstrap.settings import ProvisionerSettings


def quote_ident(name: str) -> str:
    return '"' + name.replace('"', '""') + '"'


def quote_literal(value: str) -> str:
    return "'" + value.replace("'", "''") + "'"


def statement_label(sql: str, limit: int = 80) -> str:
    first = " ".join(sql.split())
    return first if len(first) <= limit else first[: limit - 3] + "..."


class SqlExecutor(Protocol):
    def execute(self, sql: str) -> None: ...

    def close(self) -> None: ...


class EngineExecutor:
    """Executes statements over a SQLAlchemy engine, one transaction per statement."""

    def __init__(self, url: str):
        sa_url = make_url(url)
        if sa_url.drivername in ("postgresql", "postgresql+psycopg2"):
            sa_url = sa_url.set(drivername="postgresql+psycopg")
        self._engine = sa.create_engine(sa_url, future=True, poolclass=NullPool)

    def execute(self, sql: str) -> None:
        try:
            with self._engine.begin() as conn:
                conn.exec_driver_sql(sql)
        except DBAPIError as e:
            raise StatementError(sql, str(e.orig or e).strip()) from e

    def close(self) -> None:
        self._engine.dispose()


class PsqlExecutor:
    """Executes statements through the admin psql client, one invocation per statement."""

    def __init__(self, runner: CommandRunner, handle: EngineHandle, port: int, database: str):
        self._runner = runner
        self._handle = handle
        self._port = port
        self.database = database

    def execute(self, sql: str) -> None:
        result = self._runner.run(
            self._handle.command("psql", "-X", "-q", "-v", "ON_ERROR_STOP=1", "-p", self._port, "-d", self.database, "-f", "-"),
            # Statements go over stdin so role passwords never show up in argv.
            input=sql,
        )
        if not result.ok:
            raise StatementError(sql, result.stderr.strip() or f"psql exited with {result.returncode}")

    def close(self) -> None:
        pass


@dataclass(frozen=True)
class StatementFailure:
    statement: str
    error: str


@dataclass
class StatementReport:
    step: str
    applied: int = 0
    failures: list[StatementFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures


def apply_statements(executor: SqlExecutor, statements: Iterable[str], step: str) -> StatementReport:
    report = StatementReport(step=step)
    for sql in statements:
        label = statement_label(sql)
        try:
            executor.execute(sql)
        except StatementError as e:
            logger.warning("statement_failed", step=step, statement=label, error=e.message)
            report.failures.append(StatementFailure(statement=label, error=e.message))
            continue
        report.applied += 1
        logger.debug("statement_applied", step=step, statement=label)
    logger.info("statements_finished", step=step, applied=report.applied, failed=len(report.failures))
    return report


def connect_executor(settings: ProvisionerSettings, runner: CommandRunner, handle: EngineHandle) -> SqlExecutor:
    url = read_connection_url(settings.connection_file)
    if url is None:
        logger.warning("connection_info_missing", path=str(settings.connection_file), fallback="admin_psql")
        return PsqlExecutor(runner, handle, settings.db_port, settings.db_name)
    return EngineExecutor(url)
