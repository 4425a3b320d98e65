"""Shared fakes for the airflow-stack test suite.

No test talks to Docker or git: external commands go through
:class:`RecordingRunner` and the Docker SDK is replaced by :class:`FakeDockerClient`.
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

import pytest
from docker.errors import NotFound

from airflow_stack.executor import CommandResult, CommandRunner

TEMPLATE_TEXT = "AIRFLOW_UID=<USER_ID>\nAIRFLOW__CORE__FERNET_KEY=<FERNET_KEY>\nPOSTGRES_USER=airflow\n"


class RecordingRunner(CommandRunner):
    """Command runner that records argv lists instead of spawning processes."""

    def __init__(self, failures: Optional[Dict[Tuple[str, ...], int]] = None) -> None:
        super().__init__(stream_output=False)
        self.calls: List[List[str]] = []
        self.failures = dict(failures or {})

    def run(self, args: Sequence[str]) -> CommandResult:
        self.calls.append(list(args))
        returncode = self.failures.get(tuple(args), 0)
        return CommandResult(args=list(args), returncode=returncode, output="", duration=0.0)


class FakeCollection:
    def __init__(self, existing: Sequence[str] = (), error: Optional[Exception] = None) -> None:
        self.names = set(existing)
        self.error = error
        self.created: List[str] = []

    def get(self, name: str) -> str:
        if self.error is not None:
            raise self.error
        if name not in self.names:
            raise NotFound(f"{name} not found")
        return name

    def create(self, name: str) -> str:
        self.created.append(name)
        self.names.add(name)
        return name


class FakeDockerClient:
    def __init__(self, networks: Sequence[str] = (), volumes: Sequence[str] = ()) -> None:
        self.networks = FakeCollection(networks)
        self.volumes = FakeCollection(volumes)


@pytest.fixture
def runner() -> RecordingRunner:
    return RecordingRunner()


@pytest.fixture
def docker_client() -> FakeDockerClient:
    return FakeDockerClient()


@pytest.fixture
def project_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Empty working directory with a Config Template and a clean environment."""

    for name in ("EXTERNAL_NETWORK_NAME", "POSTGRES_EXTERNAL_VOLUME_NAME", "AIRFLOW_STACK_CONFIG", "AIRFLOW_STACK_ENV_FILE"):
        monkeypatch.delenv(name, raising=False)
    (tmp_path / ".env.template").write_text(TEMPLATE_TEXT, encoding="utf-8")
    monkeypatch.chdir(tmp_path)
    return tmp_path
