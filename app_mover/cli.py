"""CLI entry point for app-mover."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

import app_mover

app = typer.Typer(
    name="app-mover",
    help="Move macOS app bundles into the Applications folder.",
    no_args_is_help=True,
)
console = Console()

_TRUE_VALUES = ("1", "true", "yes", "on")
_CONFIG_KEYS = {
    "name-strategy": ("bundle", "current"),
    "replace-newer": ("true", "false", "on", "off"),
    "dialog": ("terminal", "applescript"),
}
_ENV_VARS = {
    "name-strategy": "APP_MOVER_NAME_STRATEGY",
    "replace-newer": "APP_MOVER_REPLACE_NEWER",
    "dialog": "APP_MOVER_DIALOG",
}
_DEFAULTS = {
    "name-strategy": "bundle",
    "replace-newer": "false",
    "dialog": "terminal",
}


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _resolve_setting(key: str, flag: Optional[str]) -> str:
    """Resolve a setting from CLI flag → env var → config → default."""
    if flag:
        return flag
    env_value = os.environ.get(_ENV_VARS[key])
    if env_value:
        return env_value
    try:
        from app_mover.data.store import DataStore

        store = DataStore()
        cfg_value = store.get_config(key)
        store.close()
        if cfg_value:
            return cfg_value
    except Exception:
        logging.getLogger(__name__).debug("Config store unavailable", exc_info=True)
    return _DEFAULTS[key]


def _open_store():
    """Open the history store, or None when it cannot be used."""
    from app_mover.data.store import DataStore

    try:
        return DataStore()
    except Exception as e:
        console.print(f"[yellow]History disabled: {e}[/]")
        return None


def _installed_name(name_strategy: Optional[str], name: Optional[str]):
    """Resolve --name-strategy/--name into an InstalledName, or exit 1."""
    from app_mover.core.models import InstalledName

    strategy = _resolve_setting("name-strategy", name_strategy)
    if name:
        strategy = "custom"
    if strategy == "bundle":
        return InstalledName.bundle_name()
    if strategy == "current":
        return InstalledName.current()
    if strategy == "custom":
        if not name:
            console.print("[red]--name is required with --name-strategy custom[/]")
            raise typer.Exit(1)
        return InstalledName.named(name)
    console.print(
        f"[red]Unknown name strategy: {strategy}. "
        f"Valid strategies: bundle, current, custom[/]"
    )
    raise typer.Exit(1)


def _load_bundle(path: Optional[Path]):
    from app_mover.core.bundle import current_bundle
    from app_mover.mover import bundle_at

    if path is not None:
        bundle = bundle_at(path)
        if not bundle.path.is_dir():
            console.print(f"[red]Not an app bundle: {bundle.path}[/]")
            raise typer.Exit(1)
        return bundle

    bundle = current_bundle()
    if bundle is None:
        console.print(
            "[red]Not running from an app bundle. "
            "Pass the bundle path explicitly.[/]"
        )
        raise typer.Exit(1)
    return bundle


@app.command()
def move(
    bundle_path: Optional[Path] = typer.Argument(
        None, help="App bundle to move (default: the running one)"
    ),
    name_strategy: Optional[str] = typer.Option(
        None, "--name-strategy", "-n",
        help="Installed name: bundle, current or custom",
    ),
    name: Optional[str] = typer.Option(
        None, "--name", help="Custom installed name (without .app)"
    ),
    replace_newer: Optional[bool] = typer.Option(
        None, "--replace-newer/--keep-newer",
        help="Replace an installed copy even if it is newer",
    ),
    skip_dev_builds: bool = typer.Option(
        False, "--skip-dev-builds", help="Do nothing when this is a development build"
    ),
    wait_pid: Optional[int] = typer.Option(
        None, "--wait-pid", help="Relaunch once this pid exits (default: this process)"
    ),
    dialog: Optional[str] = typer.Option(
        None, "--dialog", "-D", help="Confirmation dialog: terminal or applescript"
    ),
    yes: bool = typer.Option(
        False, "--yes", "-y", help="Skip the confirmation prompt"
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug logging"
    ),
) -> None:
    """Move an app bundle into the preferred Applications folder."""
    _configure_logging(verbose)

    from app_mover.core.environment import EnvironmentDetector, is_development_build
    from app_mover.core.errors import AppMoverError
    from app_mover.core.models import MoveOutcome
    from app_mover.core.orchestrator import InstallOrchestrator, hard_exit
    from app_mover.core.prompts import confirm_provider, standard_strings

    if skip_dev_builds and is_development_build():
        console.print("[yellow]Development build; skipping move.[/]")
        raise typer.Exit(0)

    installed_name = _installed_name(name_strategy, name)

    if replace_newer is None:
        replace_newer = (
            _resolve_setting("replace-newer", None).lower() in _TRUE_VALUES
        )

    if yes:
        confirm = lambda _: True
    else:
        try:
            confirm = confirm_provider(_resolve_setting("dialog", dialog), console)
        except ValueError as e:
            console.print(f"[red]{e}[/]")
            raise typer.Exit(1)

    bundle = _load_bundle(bundle_path)
    app_name = bundle.display_name or bundle.file_name
    environment = EnvironmentDetector.detect_current()
    store = _open_store()

    def _terminate(code: int):
        if orchestrator.outcome == MoveOutcome.MOVED:
            console.print(
                f"[green]Moved {app_name} to {orchestrator.target.destination}[/]"
            )
        else:
            console.print(
                f"[green]Opened existing copy at "
                f"{orchestrator.target.destination}[/]"
            )
        if store is not None:
            store.close()
        hard_exit(code)

    orchestrator = InstallOrchestrator(
        bundle=bundle,
        installed_name=installed_name,
        string_builder=lambda needs_auth: standard_strings(needs_auth, app_name),
        confirm=confirm,
        replace_newer_versions=replace_newer,
        pid=wait_pid,
        store=store,
        terminate=_terminate,
        os_version=environment.os_version,
    )

    try:
        outcome = orchestrator.run()
    except AppMoverError as e:
        console.print(f"[red]Error: {e}[/]")
        raise typer.Exit(1)
    finally:
        if store is not None:
            store.close()

    if outcome == MoveOutcome.ALREADY_INSTALLED:
        console.print(f"[green]{bundle.path} is already in an Applications folder.[/]")
    elif outcome == MoveOutcome.DECLINED:
        console.print("[yellow]Move cancelled.[/]")
    raise typer.Exit(0)


@app.command()
def status(
    bundle_path: Optional[Path] = typer.Argument(
        None, help="App bundle to inspect (default: the running one)"
    ),
    name_strategy: Optional[str] = typer.Option(
        None, "--name-strategy", "-n",
        help="Installed name: bundle, current or custom",
    ),
    name: Optional[str] = typer.Option(
        None, "--name", help="Custom installed name (without .app)"
    ),
) -> None:
    """Show what a move of the bundle would do."""
    from app_mover.core.conflicts import (
        is_application_running,
        is_newer_application_installed,
    )
    from app_mover.core.locations import (
        is_inside_applications_folder,
        preferred_applications_directory,
    )
    from app_mover.core.models import InstallTarget
    from app_mover.core.privileges import needs_auth
    from app_mover.core.workspace import Workspace

    installed_name = _installed_name(name_strategy, name)
    bundle = _load_bundle(bundle_path)

    table = Table(title="App Bundle")
    table.add_column("Property", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Path", str(bundle.path))
    table.add_row("Name", bundle.display_name or "(unknown)")
    table.add_row("Version", bundle.version or "(unknown)")
    table.add_row(
        "Installed", "yes" if is_inside_applications_folder(bundle.path) else "no"
    )

    applications_dir = preferred_applications_directory()
    if applications_dir is None:
        table.add_row("Target", "[red](no Applications folder found)[/]")
        console.print(table)
        raise typer.Exit(1)

    target = InstallTarget(applications_dir, installed_name.resolve(bundle))
    destination = target.destination
    running = is_application_running(destination, Workspace().running_bundle_paths())
    table.add_row("Target", str(applications_dir))
    table.add_row("Destination", str(destination))
    table.add_row("Needs auth", "yes" if needs_auth(target) else "no")
    table.add_row("Running at destination", "yes" if running else "no")
    table.add_row(
        "Newer installed",
        "yes" if is_newer_application_installed(destination, bundle) else "no",
    )
    console.print(table)


@app.command()
def history(
    limit: int = typer.Option(20, "--limit", "-l", help="Number of entries"),
) -> None:
    """List recent relocation attempts."""
    from app_mover.data.store import DataStore

    store = DataStore()
    rows = store.recent_relocations(limit)
    store.close()

    if not rows:
        console.print("[yellow]No relocations recorded.[/]")
        raise typer.Exit(0)

    table = Table(title="Relocations")
    table.add_column("When", style="dim")
    table.add_column("Source", style="cyan")
    table.add_column("Destination", style="green")
    table.add_column("Version")
    table.add_column("Outcome")
    table.add_column("Error", style="red")
    for row in rows:
        table.add_row(
            row["created_at"],
            row["source"],
            row["destination"] or "",
            row["version"] or "",
            row["outcome"] or "(incomplete)",
            row["error_message"] or "",
        )
    console.print(table)


@app.command()
def config(
    action: str = typer.Argument(
        "get", help="Action: get or set"
    ),
    key: Optional[str] = typer.Argument(
        None, help="Config key (name-strategy, replace-newer, dialog)"
    ),
    value: Optional[str] = typer.Argument(
        None, help="Value to set"
    ),
) -> None:
    """View or modify configuration."""
    from app_mover.data.store import DataStore

    store = DataStore()

    if action == "get":
        if key:
            val = store.get_config(key)
            if val is not None:
                console.print(f"{key} = {val}")
            else:
                console.print(f"[yellow]{key} is not set[/]")
        else:
            for k in _CONFIG_KEYS:
                val = store.get_config(k)
                console.print(f"{k} = {val or '(not set)'}")
    elif action == "set":
        if not key or value is None:
            console.print("[red]Usage: app-mover config set <key> <value>[/]")
            raise typer.Exit(1)
        if key not in _CONFIG_KEYS:
            console.print(
                f"[red]Unknown config key: {key}. "
                f"Valid keys: {', '.join(_CONFIG_KEYS)}[/]"
            )
            raise typer.Exit(1)
        allowed = _CONFIG_KEYS[key]
        if value not in allowed:
            console.print(
                f"[red]Invalid value for {key}: {value}. "
                f"Use one of: {', '.join(allowed)}[/]"
            )
            raise typer.Exit(1)
        store.set_config(key, value)
        console.print(f"[green]Set {key} = {value}[/]")
    else:
        console.print("[red]Unknown action. Use 'get' or 'set'.[/]")
        raise typer.Exit(1)

    store.close()


@app.command()
def version() -> None:
    """Print version."""
    console.print(f"app-mover {app_mover.__version__}")


if __name__ == "__main__":
    app()
