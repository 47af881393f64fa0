"""Click-based CLI for selective workspace installs."""

from __future__ import annotations

import asyncio
import logging
import shlex
from dataclasses import dataclass
from pathlib import Path

import click

from hyperinstall.config import HyperinstallSettings, load_settings
from hyperinstall.errors import HyperinstallError
from hyperinstall.runner import Hyperinstall


@dataclass
class CLIState:
    settings: HyperinstallSettings

    def orchestrator(self) -> Hyperinstall:
        return Hyperinstall(self.settings)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
    )


@click.group()
@click.option(
    "--root",
    type=click.Path(file_okay=False, path_type=Path),
    default=Path("."),
    show_default=True,
    help="Workspace root holding hyperinstall.json.",
)
@click.option(
    "--install-command",
    help="Override the package manager command, e.g. 'npm ci'.",
)
@click.option("--verbose", "-v", is_flag=True, help="Log debug details.")
@click.pass_context
def app(ctx: click.Context, root: Path, install_command: str | None, verbose: bool) -> None:
    """Reinstall dependencies only for workspace packages that changed."""

    _configure_logging(verbose)
    try:
        settings = load_settings(root)
    except HyperinstallError as exc:
        raise click.ClickException(str(exc)) from exc
    if install_command:
        settings = settings.merged(install_command=shlex.split(install_command))
    ctx.obj = CLIState(settings=settings)


@app.command()
@click.option(
    "--force/--no-force",
    default=False,
    show_default=True,
    help="Delete node_modules and reinstall every package.",
)
@click.pass_obj
def install(state: CLIState, force: bool) -> None:
    """Install packages whose manifest, lockfile or local dependencies changed."""

    try:
        report = asyncio.run(state.orchestrator().install(force=force))
    except HyperinstallError as exc:
        raise click.ClickException(str(exc)) from exc
    for line in report.summary_lines():
        click.echo(line)


@app.command()
@click.pass_obj
def clean(state: CLIState) -> None:
    """Delete the installation state so the next run reinstalls everything."""

    state.orchestrator().clean()


@app.command()
@click.pass_obj
def init(state: CLIState) -> None:
    """Create an empty hyperinstall.json in the workspace root."""

    try:
        path = state.orchestrator().create_package_list()
    except HyperinstallError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(f"Created {path}. Add package paths to install.")


def main() -> None:  # pragma: no cover - console entry point
    app()


if __name__ == "__main__":  # pragma: no cover
    main()
