from __future__ import annotations

from dataclasses import dataclass, field

from pgbootstrap.engine import EngineHandle
from pgbootstrap.errors import StatementError
from pgbootstrap.logging import logger
from pgbootstrap.runner import CommandRunner
from pgbootstrap.settings import ProvisionerSettings
from pgbootstrap.sql import PsqlExecutor, StatementFailure, quote_ident, quote_literal, statement_label


ADMIN_DATABASE = "postgres"


@dataclass
class AccessReport:
    database_created: bool = False
    failures: list[StatementFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures


def role_statements(db_name: str, user: str, password: str) -> list[str]:
    """Statements run against the admin database: the role itself and database-level grants."""
    role = quote_ident(user)
    pw = quote_literal(password)
    return [
        f"""DO $$
BEGIN
    IF NOT EXISTS (SELECT FROM pg_catalog.pg_roles WHERE rolname = {quote_literal(user)}) THEN
        CREATE ROLE {role} WITH LOGIN PASSWORD {pw};
    END IF;
    ALTER ROLE {role} WITH LOGIN PASSWORD {pw};
END
$$;""",
        f"GRANT ALL PRIVILEGES ON DATABASE {quote_ident(db_name)} TO {role};",
    ]


def schema_grant_statements(user: str) -> list[str]:
    """Statements run inside the application database."""
    role = quote_ident(user)
    return [
        f"GRANT USAGE ON SCHEMA public TO {role};",
        f"GRANT CREATE ON SCHEMA public TO {role};",
        f"ALTER DEFAULT PRIVILEGES IN SCHEMA public GRANT ALL ON TABLES TO {role};",
        f"ALTER DEFAULT PRIVILEGES IN SCHEMA public GRANT ALL ON SEQUENCES TO {role};",
        f"ALTER DEFAULT PRIVILEGES IN SCHEMA public GRANT ALL ON FUNCTIONS TO {role};",
        f"ALTER DEFAULT PRIVILEGES IN SCHEMA public GRANT ALL ON TYPES TO {role};",
        f"GRANT ALL ON SCHEMA public TO {role};",
        f"GRANT ALL PRIVILEGES ON ALL TABLES IN SCHEMA public TO {role};",
        f"GRANT ALL PRIVILEGES ON ALL SEQUENCES IN SCHEMA public TO {role};",
        f"GRANT ALL PRIVILEGES ON ALL FUNCTIONS IN SCHEMA public TO {role};",
    ]


def _run_all(executor: PsqlExecutor, statements: list[str], report: AccessReport) -> None:
    for sql in statements:
        try:
            executor.execute(sql)
        except StatementError as e:
            label = statement_label(sql)
            logger.warning("grant_failed", database=executor.database, statement=label, error=e.message)
            report.failures.append(StatementFailure(statement=label, error=e.message))


def ensure_database_and_role(
    runner: CommandRunner,
    handle: EngineHandle,
    settings: ProvisionerSettings,
) -> AccessReport:
    report = AccessReport()

    result = runner.run(handle.command("createdb", "-p", settings.db_port, settings.db_name))
    if result.ok:
        report.database_created = True
        logger.info("database_created", database=settings.db_name)
    elif "already exists" in result.stderr:
        logger.info("database_exists", database=settings.db_name)
    else:
        error = result.stderr.strip() or f"createdb exited with {result.returncode}"
        logger.warning("database_create_failed", database=settings.db_name, error=error)
        report.failures.append(StatementFailure(statement=f"createdb {settings.db_name}", error=error))

    admin = PsqlExecutor(runner, handle, settings.db_port, ADMIN_DATABASE)
    _run_all(admin, role_statements(settings.db_name, settings.db_user, settings.db_password), report)

    target = PsqlExecutor(runner, handle, settings.db_port, settings.db_name)
    _run_all(target, schema_grant_statements(settings.db_user), report)

    logger.info(
        "access_ensured",
        database=settings.db_name,
        user=settings.db_user,
        database_created=report.database_created,
        failed=len(report.failures),
    )
    return report
