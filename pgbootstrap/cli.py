from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from pgbootstrap.errors import EngineNotFound, StartFailed
from pgbootstrap.logging import configure_logging, logger
from pgbootstrap.provisioner import Provisioner
from pgbootstrap.runner import CommandRunner, SubprocessRunner
from pgbootstrap.settings import SETTINGS, ProvisionerSettings


def build_settings(argv: list[str] | None = None) -> ProvisionerSettings:
    parser = argparse.ArgumentParser(description="Provision a local PostgreSQL database with the baseline schema.")
    parser.add_argument("--db-name", default=SETTINGS.db_name)
    parser.add_argument("--db-user", default=SETTINGS.db_user)
    parser.add_argument("--db-password", default=SETTINGS.db_password)
    parser.add_argument("--port", type=int, default=SETTINGS.db_port)
    parser.add_argument("--data-dir", type=Path, default=SETTINGS.data_dir)
    parser.add_argument("--pg-root", type=Path, default=SETTINGS.pg_root)
    parser.add_argument("--log-level", default=SETTINGS.log_level)
    args = parser.parse_args(argv)
    return SETTINGS.model_copy(
        update={
            "db_name": args.db_name,
            "db_user": args.db_user,
            "db_password": args.db_password,
            "db_port": args.port,
            "data_dir": args.data_dir,
            "pg_root": args.pg_root,
            "log_level": args.log_level,
        }
    )


def main(argv: list[str] | None = None, runner: CommandRunner | None = None) -> int:
    settings = build_settings(argv)
    configure_logging(settings.log_level)

    provisioner = Provisioner(settings, runner or SubprocessRunner())
    try:
        report = provisioner.run()
    except (EngineNotFound, StartFailed) as e:
        logger.error("provision_aborted", error=str(e), kind=type(e).__name__)
        return 1

    print(json.dumps(report.to_dict(), indent=2, default=str))
    return 0


if __name__ == "__main__":
    sys.exit(main())
