from __future__ import annotations

import enum
import logging
from typing import Any, Optional

import docker
from docker.errors import DockerException, NotFound

from .errors import ResourceInspectionError

logger = logging.getLogger(__name__)


class ResourceKind(str, enum.Enum):
    NETWORK = "network"
    VOLUME = "volume"


class Action(str, enum.Enum):
    NOOP = "noop"
    CREATE = "create"


def plan_resource(exists: bool) -> Action:
    """Decide what provisioning a named resource requires."""

    return Action.NOOP if exists else Action.CREATE


def _collection(client: Any, kind: ResourceKind) -> Any:
    return client.networks if kind is ResourceKind.NETWORK else client.volumes


def docker_client() -> Any:
    try:
        return docker.from_env()
    except DockerException as exc:
        raise ResourceInspectionError(f"Cannot connect to the Docker daemon: {exc}") from exc


class ResourceProvisioner:
    """Create Docker networks and volumes by name when they are missing."""

    def __init__(self, client: Optional[Any] = None) -> None:
        self._client = client

    @property
    def client(self) -> Any:
        if self._client is None:
            self._client = docker_client()
        return self._client

    def exists(self, kind: ResourceKind, name: str) -> bool:
        try:
            _collection(self.client, kind).get(name)
        except NotFound:
            return False
        except DockerException as exc:
            raise ResourceInspectionError(f"Failed to inspect {kind.value} {name}: {exc}") from exc
        return True

    def ensure(self, kind: ResourceKind, name: str) -> Action:
        action = plan_resource(self.exists(kind, name))
        logger.debug("%s %s: %s", kind.value, name, action.value)
        if action is Action.CREATE:
            try:
                _collection(self.client, kind).create(name)
            except DockerException as exc:
                raise ResourceInspectionError(f"Failed to create {kind.value} {name}: {exc}") from exc
        return action


def ensure_resource(kind: ResourceKind, name: str, provisioner: Optional[ResourceProvisioner] = None) -> Action:
    """Make sure the named network or volume exists, creating it if absent."""

    provisioner = provisioner or ResourceProvisioner()
    return provisioner.ensure(ResourceKind(kind), name)
