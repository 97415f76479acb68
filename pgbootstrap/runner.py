from __future__ import annotations

import subprocess
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from pgbootstrap.logging import logger


@dataclass(frozen=True)
class CommandResult:
    args: tuple[str, ...]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class CommandRunner(Protocol):
    def run(self, args: Sequence[str], *, input: str | None = None) -> CommandResult: ...

    def spawn(self, args: Sequence[str], *, log_path: Path) -> None: ...


class SubprocessRunner:
    """Runs admin binaries as child processes. Never raises on a non-zero exit."""

    def __init__(self) -> None:
        # Spawned servers outlive this run; holding the handles keeps them from being collected mid-run.
        self.processes: list[subprocess.Popen[bytes]] = []

    def run(self, args: Sequence[str], *, input: str | None = None) -> CommandResult:
        argv = tuple(str(a) for a in args)
        logger.debug("command_started", args=list(argv))
        try:
            proc = subprocess.run(argv, input=input, capture_output=True, text=True, check=False)
        except FileNotFoundError as e:
            # Same convention as a shell: 127 for "command not found".
            return CommandResult(args=argv, returncode=127, stderr=str(e))
        return CommandResult(args=argv, returncode=proc.returncode, stdout=proc.stdout, stderr=proc.stderr)

    def spawn(self, args: Sequence[str], *, log_path: Path) -> None:
        argv = [str(a) for a in args]
        log_path.parent.mkdir(parents=True, exist_ok=True)
        with log_path.open("ab") as log:
            # The child keeps its own copy of the log fd; detach it from our session.
            proc = subprocess.Popen(
                argv,
                stdin=subprocess.DEVNULL,
                stdout=log,
                stderr=subprocess.STDOUT,
                start_new_session=True,
            )
        self.processes.append(proc)
        logger.info("process_spawned", args=argv, pid=proc.pid, log_path=str(log_path))
