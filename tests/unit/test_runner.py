from __future__ import annotations

from pathlib import Path


def test_spawn_keeps_process_handle(tmp_path: Path) -> None:
    from pgbootstrap.runner import SubprocessRunner

    runner = SubprocessRunner()
    log_path = tmp_path / "logs" / "postgres.log"
    runner.spawn(["true"], log_path=log_path)

    (proc,) = runner.processes
    assert proc.wait(timeout=10) == 0
    assert log_path.exists()


def test_run_reports_missing_executable_as_127(tmp_path: Path) -> None:
    from pgbootstrap.runner import SubprocessRunner

    result = SubprocessRunner().run([str(tmp_path / "nope")])
    assert result.returncode == 127
    assert not result.ok


def test_run_feeds_stdin(tmp_path: Path) -> None:
    from pgbootstrap.runner import SubprocessRunner

    result = SubprocessRunner().run(["cat"], input="SELECT 1;")
    assert result.ok
    assert result.stdout == "SELECT 1;"
