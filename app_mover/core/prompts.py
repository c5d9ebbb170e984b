"""Confirmation prompt text and the providers that show it."""

from __future__ import annotations

import logging
from typing import Callable, Optional

from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm

from app_mover.core.bundle import current_bundle
from app_mover.core.models import InstallOutcome, PromptStrings
from app_mover.core.osascript import escape_string, run_applescript

logger = logging.getLogger(__name__)

StringBuilder = Callable[[bool], PromptStrings]
ConfirmCallback = Callable[[PromptStrings], bool]

DEFAULT_APP_NAME = "The App"


def standard_strings(needs_auth: bool, app_name: Optional[str] = None) -> PromptStrings:
    """Default English prompt; mentions the password when ``needs_auth``."""
    if app_name is None:
        bundle = current_bundle()
        app_name = (bundle.display_name if bundle else None) or DEFAULT_APP_NAME
    body = f"{app_name} needs to move to your Applications folder in order to work properly."
    if needs_auth:
        body += (
            " You need to authenticate with your administrator password"
            " to complete this step."
        )
    return PromptStrings(
        title="Move to Applications folder",
        body=body,
        accept_label="Move to Applications Folder",
        decline_label="Don't Move",
    )


def terminal_confirm(
    strings: PromptStrings, console: Optional[Console] = None
) -> bool:
    """Show the prompt in the terminal and ask for a yes/no answer."""
    console = console or Console()
    console.print(Panel(strings.body, title=strings.title, border_style="blue"))
    return Confirm.ask(
        f"[yellow]{strings.accept_label}?[/] [dim](no = {strings.decline_label})[/]",
        console=console,
        default=True,
    )


def build_dialog_script(strings: PromptStrings) -> str:
    accept = escape_string(strings.accept_label)
    decline = escape_string(strings.decline_label)
    return (
        f'display dialog "{escape_string(strings.body)}" '
        f'with title "{escape_string(strings.title)}" '
        f'buttons {{"{decline}", "{accept}"}} '
        f'default button "{accept}" cancel button "{decline}" '
        f"with icon caution"
    )


def applescript_confirm(strings: PromptStrings) -> bool:
    """Show a native dialog; the decline button reports as Cancel."""
    result, _ = run_applescript(build_dialog_script(strings))
    if result.outcome == InstallOutcome.FAILED:
        logger.error(
            "Confirmation dialog failed: number=%d, message=%s",
            result.code, result.message,
        )
    return result.outcome == InstallOutcome.SUCCESS


def confirm_provider(name: str, console: Optional[Console] = None) -> ConfirmCallback:
    """Return the confirmation provider called ``name``."""
    if name == "terminal":
        return lambda strings: terminal_confirm(strings, console)
    if name == "applescript":
        return applescript_confirm
    raise ValueError(f"Unknown dialog: {name!r}. Use 'terminal' or 'applescript'.")
