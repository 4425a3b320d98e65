from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Dict, List, Mapping, MutableMapping, Optional

import yaml
from dotenv import dotenv_values
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_NAME = "airflow_stack.yml"
CONFIG_PATH_ENV = "AIRFLOW_STACK_CONFIG"

DEFAULT_PROD_COMPOSE_FILES = [
    "docker-compose.yaml",
    "docker-compose.override.yaml",
    "docker-compose.prod.yaml",
]

# Settings fields that the process environment (or the Config File) may override.
ENV_OVERRIDES = {
    "network_name": "EXTERNAL_NETWORK_NAME",
    "volume_name": "POSTGRES_EXTERNAL_VOLUME_NAME",
}
ENV_FILE_OVERRIDE = "AIRFLOW_STACK_ENV_FILE"


class DeploySettings(BaseModel):
    """Everything the CLI needs to bootstrap and drive the compose stack."""

    model_config = ConfigDict(extra="forbid")

    env_file: Path = Path(".env")
    env_template: Path = Path(".env.template")
    env_prod_template: Path = Path(".env.prod.template")
    network_name: str = "web"
    volume_name: str = "airflow-database-volume"
    compose_command: List[str] = Field(default_factory=lambda: ["docker", "compose"])
    compose_prod_files: List[str] = Field(default_factory=lambda: list(DEFAULT_PROD_COMPOSE_FILES))
    sync_remote: str = "origin"
    sync_branch: str = "main"
    env_values: Dict[str, str] = Field(default_factory=dict)
    source_path: Optional[Path] = None


def _load_yaml(path: Path) -> MutableMapping:
    try:
        with path.open("r", encoding="utf-8") as handle:
            raw = yaml.safe_load(handle) or {}
    except FileNotFoundError as exc:
        raise ConfigError(f"Configuration file not found: {path}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse YAML from {path}") from exc
    if not isinstance(raw, MutableMapping):
        raise ConfigError(f"Configuration in {path} must be a mapping")
    return raw


def _resolve(base_dir: Path, value: Path) -> Path:
    return value if value.is_absolute() else base_dir / value


def read_env_values(path: Path) -> Dict[str, str]:
    """Return the ``KEY=VALUE`` pairs of a Config File, or nothing if it is absent."""

    if not path.exists():
        return {}
    return {key: value for key, value in dotenv_values(path).items() if value is not None}


def find_default_config(start: Optional[Path] = None) -> Optional[Path]:
    """Find ``airflow_stack.yml`` by walking up from ``start`` (defaults to CWD)."""

    cwd = start or Path.cwd()
    for candidate in [cwd, *cwd.parents]:
        path = candidate / DEFAULT_CONFIG_NAME
        if path.exists():
            return path
    return None


def load_settings(
    path: Optional[Path] = None,
    *,
    environ: Optional[Mapping[str, str]] = None,
    cwd: Optional[Path] = None,
) -> DeploySettings:
    """Build settings from defaults, the YAML file, the Config File and the environment.

    Later sources win: Config File values > process environment > YAML file > defaults,
    the same order make gives an included and exported ``.env``.
    """

    env = os.environ if environ is None else environ
    workdir = cwd or Path.cwd()

    if path is None and env.get(CONFIG_PATH_ENV):
        path = Path(env[CONFIG_PATH_ENV])
    config_path = path or find_default_config(workdir)
    raw = _load_yaml(config_path) if config_path else {}
    base_dir = config_path.parent if config_path else workdir

    try:
        settings = DeploySettings(**raw)
    except ValidationError as exc:
        raise ConfigError(f"Invalid settings in {config_path}: {exc}") from exc

    if env.get(ENV_FILE_OVERRIDE):
        settings.env_file = Path(env[ENV_FILE_OVERRIDE])
    settings.env_file = _resolve(base_dir, settings.env_file)
    settings.env_template = _resolve(base_dir, settings.env_template)
    settings.env_prod_template = _resolve(base_dir, settings.env_prod_template)
    settings.source_path = config_path

    settings.env_values = read_env_values(settings.env_file)
    for field_name, env_name in ENV_OVERRIDES.items():
        value = settings.env_values.get(env_name) or env.get(env_name)
        if value:
            setattr(settings, field_name, value)

    logger.debug(
        "Loaded settings from %s (env file %s, %d value(s))",
        config_path or "defaults",
        settings.env_file,
        len(settings.env_values),
    )
    return settings


__all__ = [
    "DeploySettings",
    "DEFAULT_CONFIG_NAME",
    "find_default_config",
    "load_settings",
    "read_env_values",
]
