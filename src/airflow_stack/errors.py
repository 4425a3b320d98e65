from __future__ import annotations

from typing import Sequence


class StackError(Exception):
    """Base class for failures reported by the airflow-stack CLI."""


class ConfigError(StackError):
    """Raised when the airflow-stack settings are invalid."""


class MissingTemplateError(StackError):
    """Raised when the Config File must be created but no template exists."""


class ResourceInspectionError(StackError):
    """Raised when Docker fails to inspect or create a shared resource."""


class DelegatedCommandError(StackError):
    """Raised when an external command exits with a non-zero status."""

    def __init__(self, args: Sequence[str], returncode: int) -> None:
        self.command = list(args)
        self.returncode = returncode
        super().__init__(f"Command failed with exit code {returncode}: {' '.join(self.command)}")
