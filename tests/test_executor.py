from __future__ import annotations

import sys

import pytest

from airflow_stack.errors import DelegatedCommandError
from airflow_stack.executor import CommandRunner, run_sequence


def test_run_captures_output() -> None:
    result = CommandRunner(stream_output=False).run([sys.executable, "-c", "print('hello')"])

    assert result.ok
    assert result.output.strip() == "hello"


def test_base_env_is_exported() -> None:
    runner = CommandRunner(stream_output=False, base_env={"AIRFLOW_UID": "4242"})

    result = runner.run([sys.executable, "-c", "import os; print(os.environ['AIRFLOW_UID'])"])

    assert result.output.strip() == "4242"


def test_check_propagates_exit_code_unmodified() -> None:
    runner = CommandRunner(stream_output=False)

    with pytest.raises(DelegatedCommandError) as excinfo:
        runner.check([sys.executable, "-c", "import sys; sys.exit(3)"])

    assert excinfo.value.returncode == 3


def test_missing_executable_behaves_like_the_shell() -> None:
    result = CommandRunner(stream_output=False).run(["definitely-not-a-real-binary-xyz"])

    assert result.returncode == 127


def test_run_sequence_stops_at_first_failure() -> None:
    runner = CommandRunner(stream_output=False)
    commands = [
        [sys.executable, "-c", "import sys; sys.exit(1)"],
        [sys.executable, "-c", "print('never')"],
    ]

    with pytest.raises(DelegatedCommandError):
        run_sequence(runner, commands)


@pytest.mark.skipif(sys.platform == "win32", reason="POSIX execute permission bits")
def test_non_executable_file_exits_like_the_shell(tmp_path) -> None:
    script = tmp_path / "deploy.sh"
    script.write_text("#!/bin/sh\necho hi\n", encoding="utf-8")
    script.chmod(0o644)

    with pytest.raises(DelegatedCommandError) as excinfo:
        CommandRunner(stream_output=False).check([str(script)])

    assert excinfo.value.returncode == 126
