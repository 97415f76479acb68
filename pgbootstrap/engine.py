from __future__ import annotations

import getpass
import shutil
from dataclasses import dataclass
from pathlib import Path

from pgbootstrap.errors import EngineNotFound
from pgbootstrap.logging import logger


REQUIRED_BINARIES = ("postgres", "initdb", "pg_isready", "psql", "createdb")


@dataclass(frozen=True)
class EngineHandle:
    version: str
    bin_dir: Path
    # None means run the binaries as the invoking user.
    run_as: str | None = None

    def binary(self, name: str) -> Path:
        return self.bin_dir / name

    def command(self, name: str, *args: object) -> list[str]:
        return self.as_engine_user(self.binary(name), *args)

    def as_engine_user(self, *argv: object) -> list[str]:
        args = [str(a) for a in argv]
        if self.run_as:
            return ["sudo", "-u", self.run_as, *args]
        return args


def _version_key(name: str) -> tuple[int, ...]:
    parts: list[int] = []
    for p in name.split("."):
        if not p.isdigit():
            break
        parts.append(int(p))
    return tuple(parts)


def _has_binaries(bin_dir: Path) -> bool:
    return all((bin_dir / b).is_file() for b in REQUIRED_BINARIES)


def _resolve_run_as(os_user: str | None) -> str | None:
    if not os_user:
        return None
    if getpass.getuser() == os_user:
        return None
    return os_user


def locate_engine(pg_root: Path, os_user: str | None = "postgres") -> EngineHandle:
    """
    Find the PostgreSQL server binaries.

    Debian-style installs keep one directory per major version under `pg_root`
    (e.g. /usr/lib/postgresql/16/bin). The highest complete version wins.
    Without any, a `postgres` on PATH is accepted if its siblings are present.
    """
    run_as = _resolve_run_as(os_user)

    candidates: list[Path] = []
    if pg_root.is_dir():
        candidates = sorted(
            (p for p in pg_root.iterdir() if p.is_dir() and _version_key(p.name)),
            key=lambda p: _version_key(p.name),
            reverse=True,
        )
    for version_dir in candidates:
        bin_dir = version_dir / "bin"
        if _has_binaries(bin_dir):
            handle = EngineHandle(version=version_dir.name, bin_dir=bin_dir, run_as=run_as)
            logger.info("engine_located", version=handle.version, bin_dir=str(bin_dir), run_as=run_as)
            return handle
        logger.warning("engine_incomplete", version=version_dir.name, bin_dir=str(bin_dir))

    on_path = shutil.which("postgres")
    if on_path:
        bin_dir = Path(on_path).resolve().parent
        if _has_binaries(bin_dir):
            handle = EngineHandle(version="path", bin_dir=bin_dir, run_as=run_as)
            logger.info("engine_located", version=handle.version, bin_dir=str(bin_dir), run_as=run_as)
            return handle

    raise EngineNotFound(f"no PostgreSQL installation with {', '.join(REQUIRED_BINARIES)} under {pg_root} or on PATH")
