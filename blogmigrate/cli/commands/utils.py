"""
Shared helpers for CLI commands.
"""
import typer


def confirm_action(message: str, default: bool = False) -> bool:
    """Ask the operator to confirm; aborting the prompt counts as no."""
    try:
        return typer.confirm(message, default=default)
    except typer.Abort:
        return False
