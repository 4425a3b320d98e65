from __future__ import annotations

from typing import Dict, List

from .config import DeploySettings
from .executor import CommandRunner

PRUNE_COMMAND = ["docker", "image", "prune", "-f"]


class ComposeProject:
    """Build ``docker compose`` invocations for the dev or prod stack."""

    def __init__(self, settings: DeploySettings, *, prod: bool = False) -> None:
        self.settings = settings
        self.prod = prod

    @property
    def prefix(self) -> List[str]:
        command = list(self.settings.compose_command)
        if not self.prod:
            return command
        for compose_file in self.settings.compose_prod_files:
            command.extend(["-f", compose_file])
        command.extend(["--env-file", str(self.settings.env_file)])
        return command

    def command(self, *args: str) -> List[str]:
        return [*self.prefix, *args]

    def up(self) -> List[str]:
        return self.command("up", "-d", "--build", "--remove-orphans")

    def down(self) -> List[str]:
        # Prod teardown also drops anonymous volumes.
        return self.command("down", "-v") if self.prod else self.command("down")

    def restart(self) -> List[str]:
        return self.command("restart")

    def build(self) -> List[str]:
        return self.command("build")

    def status(self) -> List[str]:
        return self.command("ps")

    def logs(self) -> List[str]:
        return self.command("logs", "--follow")

    def pull(self) -> List[str]:
        return self.command("pull")

    def validate(self) -> List[str]:
        return self.command("config")


def compose_environment(settings: DeploySettings) -> Dict[str, str]:
    """Config File values exported to every delegated command."""

    return dict(settings.env_values)


def make_runner(settings: DeploySettings) -> CommandRunner:
    project_dir = settings.env_file.parent
    return CommandRunner(base_env=compose_environment(settings), cwd=project_dir)
