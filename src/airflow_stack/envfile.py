"""Create and populate the local ``.env`` Config File from its template.

The Config File's existence is the only idempotence marker: once it has been
copied from the template it is never regenerated. Dynamic values are written
by plain text substitution of the ``<USER_ID>`` and ``<FERNET_KEY>`` tokens.
"""

from __future__ import annotations

import enum
import logging
import os
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

import typer
from cryptography.fernet import Fernet

from .errors import MissingTemplateError

logger = logging.getLogger(__name__)

USER_ID_TOKEN = "<USER_ID>"
FERNET_KEY_TOKEN = "<FERNET_KEY>"
BACKUP_SUFFIX = ".bak"


class ConfigState(str, enum.Enum):
    ABSENT = "absent"
    TEMPLATED = "templated"
    PARTIALLY_CONFIGURED = "partially-configured"
    READY = "ready"


@dataclass
class PopulateResult:
    user_id: Optional[int] = None
    fernet_key_set: bool = False

    @property
    def changed(self) -> bool:
        return self.user_id is not None or self.fernet_key_set


def current_user_id() -> int:
    return os.getuid()


def generate_fernet_key() -> str:
    return Fernet.generate_key().decode()


def ensure_config_exists(config_file: Path, template: Path) -> bool:
    """Copy ``template`` to ``config_file`` unless the Config File already exists.

    Returns ``True`` when a new file was created.
    """

    if config_file.exists():
        typer.echo(f"==> {config_file.name} already exists")
        typer.echo("==> Nothing will be done.")
        return False

    typer.echo(f"==> {config_file.name} not found. Creating from template...")
    if not template.exists():
        raise MissingTemplateError(f"No {template.name} found at {template}. Cannot continue.")

    shutil.copyfile(template, config_file)
    logger.debug("Copied %s to %s", template, config_file)
    typer.echo(f"⚠️ Please edit {config_file.name} with your custom values.")
    return True


def substitute_placeholder(config_file: Path, token: str, value: str) -> bool:
    """Replace every ``token`` in ``config_file`` with ``value``.

    The previous content is kept in a ``.bak`` sibling while the file is
    rewritten; callers remove it with :func:`remove_backup`. Returns ``False``
    without touching the file when the token is absent.
    """

    content = config_file.read_text(encoding="utf-8")
    if token not in content:
        return False
    shutil.copyfile(config_file, backup_path(config_file))
    config_file.write_text(content.replace(token, value), encoding="utf-8")
    return True


def backup_path(config_file: Path) -> Path:
    return config_file.with_name(config_file.name + BACKUP_SUFFIX)


def remove_backup(config_file: Path) -> None:
    backup_path(config_file).unlink(missing_ok=True)


def populate_dynamic_values(
    config_file: Path,
    *,
    user_id: Callable[[], int] = current_user_id,
    key_factory: Callable[[], str] = generate_fernet_key,
) -> PopulateResult:
    """Fill in the user id and a fresh Fernet key in ``config_file``."""

    result = PopulateResult()
    typer.echo(f"==> Configuring {config_file.name} with dynamic values...")
    try:
        uid = user_id()
        if substitute_placeholder(config_file, USER_ID_TOKEN, str(uid)):
            result.user_id = uid
            typer.echo(f"==> AIRFLOW_UID set to {uid}")

        if FERNET_KEY_TOKEN in config_file.read_text(encoding="utf-8"):
            # Quoted so the value survives shell-style parsing of the file.
            substitute_placeholder(config_file, FERNET_KEY_TOKEN, f"'{key_factory()}'")
            result.fernet_key_set = True
            typer.echo(f"✅ Fernet key set in {config_file.name}")
    finally:
        remove_backup(config_file)

    if not result.changed:
        logger.debug("No placeholders left in %s", config_file)
    typer.echo(f"==> {config_file.name} configured successfully.")
    return result


def config_state(config_file: Path) -> ConfigState:
    """Infer the Config File's lifecycle state from the placeholders it still holds."""

    if not config_file.exists():
        return ConfigState.ABSENT
    content = config_file.read_text(encoding="utf-8")
    has_uid = USER_ID_TOKEN in content
    has_key = FERNET_KEY_TOKEN in content
    if has_uid and has_key:
        return ConfigState.TEMPLATED
    if has_uid or has_key:
        return ConfigState.PARTIALLY_CONFIGURED
    return ConfigState.READY
