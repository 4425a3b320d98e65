from __future__ import annotations

import logging
from typing import Callable, List

import typer

from .executor import CommandRunner, run_sequence

logger = logging.getLogger(__name__)

SYNC_PROMPT = "⚠️ This will discard all local changes. Are you sure?"


def _ask(question: str) -> bool:
    return typer.confirm(question, default=False)


def sync_commands(remote: str = "origin", branch: str = "main") -> List[List[str]]:
    return [
        ["git", "fetch", remote],
        ["git", "reset", "--hard", f"{remote}/{branch}"],
    ]


def destructive_resync(
    confirm: Callable[[str], bool] = _ask,
    runner: CommandRunner | None = None,
    *,
    remote: str = "origin",
    branch: str = "main",
) -> bool:
    """Hard-reset the working tree to ``remote/branch`` after an explicit yes.

    Returns ``False`` when the user declines; nothing is run in that case.
    """

    if not confirm(SYNC_PROMPT):
        typer.echo("Sync cancelled.")
        return False

    typer.echo(f"==> Syncing with the remote repository ({remote}/{branch})...")
    run_sequence(runner or CommandRunner(), sync_commands(remote, branch))
    logger.debug("Working tree reset to %s/%s", remote, branch)
    typer.echo("✅ Sync completed.")
    return True
