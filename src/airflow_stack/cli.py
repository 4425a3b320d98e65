from __future__ import annotations

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Callable, Iterator, List, Optional

import typer
from typer.core import TyperGroup

from . import __version__
from .compose import PRUNE_COMMAND, ComposeProject, make_runner
from .config import DEFAULT_CONFIG_NAME, DeploySettings, load_settings
from .envfile import config_state, ensure_config_exists, populate_dynamic_values
from .errors import DelegatedCommandError, StackError
from .executor import run_sequence
from .resources import Action, ResourceKind, ResourceProvisioner, ensure_resource
from .sync import destructive_resync
from .templates import COMMAND_GROUPS, SETTINGS_TEMPLATE

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
UNKNOWN_COMMAND_MSG = "🚫 Error: Command not found. Use 'airflow-stack help' to see available commands."

logger = logging.getLogger("airflow_stack.cli")


class StackGroup(TyperGroup):
    """Command group that reports unknown commands with a single fixed message."""

    def resolve_command(self, ctx: typer.Context, args: List[str]):
        # Typer may bundle its own click, so fail through the context instead of
        # catching a specific UsageError class.
        name = args[0] if args else None
        if name and not name.startswith("-") and self.get_command(ctx, name) is None:
            ctx.fail(UNKNOWN_COMMAND_MSG)
        return super().resolve_command(ctx, args)


app = typer.Typer(cls=StackGroup, help="Bootstrap and operate the Airflow Docker Compose stack")


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    config: Optional[Path] = typer.Option(None, "--config", help=f"Path to the {DEFAULT_CONFIG_NAME} file."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log external commands and decisions."),
) -> None:
    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING, format=LOG_FORMAT)
    ctx.obj = config
    if ctx.invoked_subcommand is None:
        show_help()


@contextmanager
def _exit_on_error() -> Iterator[None]:
    try:
        yield
    except DelegatedCommandError as exc:
        typer.echo(f"⚠️ {exc}", err=True)
        raise typer.Exit(code=exc.returncode)
    except StackError as exc:
        typer.echo(f"⚠️ {exc}", err=True)
        raise typer.Exit(code=1)


def _load_or_exit(ctx: typer.Context) -> DeploySettings:
    with _exit_on_error():
        settings = load_settings(ctx.obj)
    logger.debug("Network %s, volume %s, env file %s", settings.network_name, settings.volume_name, settings.env_file)
    return settings


def _run_compose(ctx: typer.Context, *builders: Callable[[ComposeProject], List[str]], prod: bool = False) -> None:
    settings = _load_or_exit(ctx)
    project = ComposeProject(settings, prod=prod)
    with _exit_on_error():
        run_sequence(make_runner(settings), [build(project) for build in builders])


def _prune(settings: DeploySettings) -> None:
    typer.echo("-> Cleaning up unused Docker images...")
    make_runner(settings).check(PRUNE_COMMAND)


@app.command("help")
def show_help() -> None:
    """🤔 Show this help message"""

    for group, commands in COMMAND_GROUPS.items():
        typer.secho(f"Available commands ({group}):", fg=typer.colors.YELLOW, bold=True)
        for name in sorted(commands):
            typer.echo(f"  {typer.style(f'{name:<15}', fg=typer.colors.CYAN)} {commands[name]}")
        typer.echo("")


@app.command()
def version() -> None:
    """Print the installed airflow-stack version."""

    typer.echo(__version__)


@app.command()
def init(
    path: Path = typer.Option(Path(DEFAULT_CONFIG_NAME), help="Where to write the starter settings."),
    force: bool = typer.Option(False, "--force", help="Overwrite an existing file if present."),
) -> None:
    """📝 Write a starter airflow_stack.yml"""

    if path.exists() and not force:
        typer.echo(f"Settings already exist at {path}. Use --force to overwrite.")
        raise typer.Exit(code=1)

    path.write_text(SETTINGS_TEMPLATE.strip() + "\n", encoding="utf-8")
    typer.echo(f"Created starter settings at {path}")


@app.command()
def setup(
    ctx: typer.Context,
    prod: bool = typer.Option(False, "--prod", help="Create .env from the production template."),
) -> None:
    """🛠️ Prepare the environment"""

    settings = _load_or_exit(ctx)
    template = settings.env_prod_template if prod else settings.env_template
    typer.echo("==> Preparing the environment...")
    with _exit_on_error():
        if ensure_config_exists(settings.env_file, template):
            # The fresh .env may name the network and volume.
            settings = load_settings(ctx.obj)
        populate_dynamic_values(settings.env_file)

        provisioner = ResourceProvisioner()
        for kind, name in ((ResourceKind.NETWORK, settings.network_name), (ResourceKind.VOLUME, settings.volume_name)):
            typer.echo(f"==> Checking for {kind.value} {name}...")
            if ensure_resource(kind, name, provisioner) is Action.CREATE:
                typer.echo(f"==> {kind.value.capitalize()} {name} not found. Created.")
            typer.echo(f"✅ {kind.value.capitalize()} {name} is ready.")
    typer.echo("The environment is ready. ☑️")


@app.command("env-status")
def env_status(ctx: typer.Context) -> None:
    """🔎 Show the state of the .env file"""

    settings = _load_or_exit(ctx)
    typer.echo(f"{settings.env_file}: {config_state(settings.env_file).value}")


@app.command()
def sync(ctx: typer.Context) -> None:
    """❗️ Sync with the remote branch (discards local changes!)"""

    settings = _load_or_exit(ctx)
    with _exit_on_error():
        destructive_resync(
            runner=make_runner(settings),
            remote=settings.sync_remote,
            branch=settings.sync_branch,
        )


@app.command()
def prune(ctx: typer.Context) -> None:
    """🧹 Clean up unused Docker images"""

    settings = _load_or_exit(ctx)
    with _exit_on_error():
        _prune(settings)


# --- development targets ---


@app.command()
def up(ctx: typer.Context) -> None:
    """🚀 Start containers (and build if necessary)"""

    _run_compose(ctx, ComposeProject.up)


@app.command()
def down(ctx: typer.Context) -> None:
    """🛑 Stop containers"""

    _run_compose(ctx, ComposeProject.down)


@app.command()
def restart(ctx: typer.Context) -> None:
    """🔄 Restart running containers"""

    _run_compose(ctx, ComposeProject.restart)


@app.command()
def rebuild(ctx: typer.Context) -> None:
    """💥 Rebuild images and restart all services"""

    _run_compose(ctx, ComposeProject.down, ComposeProject.up)
    typer.echo("✅ Rebuild complete.")


@app.command()
def build(ctx: typer.Context) -> None:
    """🔨 Build or rebuild service images"""

    _run_compose(ctx, ComposeProject.build)


@app.command()
def status(ctx: typer.Context) -> None:
    """📊 Show container status"""

    _run_compose(ctx, ComposeProject.status)


@app.command()
def logs(ctx: typer.Context) -> None:
    """📜 Show logs in real time"""

    _run_compose(ctx, ComposeProject.logs)


@app.command()
def pull(ctx: typer.Context) -> None:
    """📥 Pull images"""

    _run_compose(ctx, ComposeProject.pull)


@app.command()
def validate(ctx: typer.Context) -> None:
    """✅ Validate the compose configuration"""

    _run_compose(ctx, ComposeProject.validate)


# --- production targets ---


@app.command()
def deploy(ctx: typer.Context) -> None:
    """🚀 Deploy the application to production"""

    typer.echo("-> Starting production services...")
    _run_compose(ctx, ComposeProject.up, prod=True)
    prune(ctx)
    typer.echo("✅ Deployment to production complete.")


@app.command("pull-prod")
def pull_prod(ctx: typer.Context) -> None:
    """📥 Pull fresh images from the registry"""

    typer.echo("-> Pulling latest images for production...")
    _run_compose(ctx, ComposeProject.pull, prod=True)


@app.command("up-prod")
def up_prod(ctx: typer.Context) -> None:
    """🚀 Start production services"""

    typer.echo("-> Starting production services...")
    _run_compose(ctx, ComposeProject.up, prod=True)


@app.command("down-prod")
def down_prod(ctx: typer.Context) -> None:
    """🛑 Stop production services"""

    typer.echo("-> Stopping production services...")
    _run_compose(ctx, ComposeProject.down, prod=True)


@app.command("restart-prod")
def restart_prod(ctx: typer.Context) -> None:
    """🔄 Restart production services"""

    typer.echo("-> Restarting production services...")
    _run_compose(ctx, ComposeProject.restart, prod=True)


@app.command("validate-prod")
def validate_prod(ctx: typer.Context) -> None:
    """✅ Validate the production compose configuration"""

    _run_compose(ctx, ComposeProject.validate, prod=True)


if __name__ == "__main__":
    app()
