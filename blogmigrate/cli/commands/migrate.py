"""
Migration commands for moving blog data between stores.
"""
from __future__ import annotations

from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.table import Table

from blogmigrate.cli.commands.utils import confirm_action
from blogmigrate.cli.logging import setup_cli_logging
from blogmigrate.core.config import get_settings, mask_credentials
from blogmigrate.schemas.dto import MigrationReport, MigrationRunResult, ValidationResult
from blogmigrate.services.backup_service import (
    BackupService,
    BackupValidationError,
    find_latest_backup,
)
from blogmigrate.services.migration_service import (
    TARGET_LABEL,
    MigrationService,
    connect_stores,
)
from blogmigrate.services.migration_validation_service import MigrationValidationService

app = typer.Typer(help="Blog data migration commands")
console = Console()

VerboseOption = Annotated[bool, typer.Option("--verbose", "-v", help="Show debug logging")]
AssumeYesOption = Annotated[
    bool, typer.Option("--yes", "-y", help="Run without confirmation prompts")
]


def _print_messages(title: str, messages: list[str], style: str) -> None:
    if not messages:
        return
    console.print(f"\n[{style}]{title}:[/{style}]")
    for index, message in enumerate(messages, start=1):
        console.print(f"  {index}. {message}")


def _validation_table(validation: ValidationResult) -> Table:
    table = Table(title="Validation Results")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="white")
    table.add_row("Source categories", str(validation.source_categories))
    table.add_row("Target categories", str(validation.target_categories))
    table.add_row("Source blogs", str(validation.source_blogs))
    table.add_row("Target blogs", str(validation.target_blogs))
    table.add_row("Blogs with invalid categories", str(validation.blogs_with_invalid_categories))
    table.add_row(
        "Data integrity",
        "[green]Valid[/green]" if validation.is_valid else "[red]Issues found[/red]",
    )
    return table


def _print_run_result(result: MigrationRunResult) -> None:
    summary = Table(title="Migration Results")
    summary.add_column("Metric", style="cyan")
    summary.add_column("Value", style="white")
    summary.add_row("Success", "yes" if result.success else "no")
    summary.add_row("Categories migrated", str(result.categories_migrated))
    summary.add_row("Categories reused", str(result.categories_reused))
    summary.add_row("Blogs migrated", str(result.blogs_migrated))
    summary.add_row("Blogs skipped", str(result.blogs_skipped))
    summary.add_row("Warnings", str(len(result.warnings)))
    summary.add_row("Errors", str(len(result.errors)))
    summary.add_row("Duration", f"{result.duration_ms / 1000:.1f}s")
    summary.add_row("Backup file", result.backup_file or "-")
    summary.add_row("Target snapshot", result.target_snapshot_file or "-")
    summary.add_row("Report file", result.report_file or "-")
    console.print(summary)

    _print_messages("Warnings", result.warnings, "yellow")
    _print_messages("Errors", result.errors, "red")

    console.print(_validation_table(result.validation))
    _print_messages("Validation Issues", result.validation.issues, "red")


@app.command("run")
def run_migration(
    skip_backup: Annotated[
        bool, typer.Option("--skip-backup", help="Do not snapshot the stores first")
    ] = False,
    assume_yes: AssumeYesOption = False,
    verbose: VerboseOption = False,
):
    """Migrate categories and blog posts from the source store into the target store."""
    logger = setup_cli_logging("migrate", verbose=verbose)
    settings = get_settings()

    try:
        source_uri, target_uri = settings.require_store_uris()
    except ValueError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=2)

    header = Table(title="Blog Migration")
    header.add_column("Setting", style="cyan")
    header.add_column("Value", style="white")
    header.add_row("Source", mask_credentials(source_uri))
    header.add_row("Target", mask_credentials(target_uri))
    header.add_row("Backup dir", str(settings.backup_dir))
    header.add_row("Environment", settings.environment)
    console.print(header)

    if settings.is_production and not assume_yes:
        console.print("[yellow]Production environment detected. Ensure you have a recent backup.[/yellow]")
        if not confirm_action("Do you want to continue?", default=False):
            console.print("[yellow]Migration cancelled[/yellow]")
            raise typer.Exit(code=0)

    try:
        with connect_stores(settings, create_schema=True) as (source, target):
            service = MigrationService(source, target, settings.backup_dir)
            result = service.execute_migration(skip_backup=skip_backup)
    except Exception as exc:  # noqa: BLE001 - report and exit non-zero
        logger.error(f"Migration script failed: {exc}")
        console.print(f"\n[red]Migration failed: {exc}[/red]")
        raise typer.Exit(code=1)

    _print_run_result(result)

    rollback_hint = result.target_snapshot_file
    if result.success:
        console.print("\n[green]Migration completed successfully![/green]")
        if rollback_hint:
            console.print(f"To rollback if needed: blog-migrate migrate rollback \"{rollback_hint}\"")
        return

    console.print("\n[red]Migration completed with errors[/red]")
    if rollback_hint:
        console.print(f"To rollback: blog-migrate migrate rollback \"{rollback_hint}\"")
    raise typer.Exit(code=1)


@app.command("rollback")
def rollback_migration(
    backup_file: Annotated[
        Optional[Path],
        typer.Argument(help="Backup file to restore; defaults to the latest target snapshot"),
    ] = None,
    assume_yes: AssumeYesOption = False,
    verbose: VerboseOption = False,
):
    """Replace the target store's categories and blogs with a backup."""
    logger = setup_cli_logging("rollback", verbose=verbose)
    settings = get_settings()

    backup_file = backup_file or find_latest_backup(settings.backup_dir, TARGET_LABEL)
    if backup_file is None:
        console.print("[red]Backup file path is required for rollback[/red]")
        raise typer.Exit(code=2)
    if not backup_file.exists():
        console.print(f"[red]Backup file not found: {backup_file}[/red]")
        raise typer.Exit(code=2)

    console.print(f"Using backup file: {backup_file}")
    if not assume_yes:
        if not confirm_action(
            "This will delete all categories and blogs in the target store. Continue?",
            default=False,
        ):
            console.print("[yellow]Rollback cancelled[/yellow]")
            raise typer.Exit(code=0)

    report = MigrationReport()
    try:
        with connect_stores(settings, create_schema=True) as (source, target):
            service = MigrationService(source, target, settings.backup_dir)
            result = service.rollback(backup_file, report)
    except Exception as exc:  # noqa: BLE001 - report and exit non-zero
        logger.error(f"Rollback failed: {exc}")
        console.print(f"[red]Rollback failed: {exc}[/red]")
        raise typer.Exit(code=1)

    _print_messages("Warnings", report.warnings, "yellow")
    console.print("[green]Rollback completed successfully![/green]")
    console.print(f"Categories restored: {result.categories_restored}")
    console.print(f"Blogs restored: {result.blogs_restored}")


@app.command("backup")
def create_backup(verbose: VerboseOption = False):
    """Write a backup of the source store without migrating."""
    logger = setup_cli_logging("backup", verbose=verbose)
    settings = get_settings()

    try:
        with connect_stores(settings) as (source, _target):
            backup = BackupService(source, settings.backup_dir).create_backup()
    except Exception as exc:  # noqa: BLE001 - report and exit non-zero
        logger.error(f"Backup failed: {exc}")
        console.print(f"[red]Backup failed: {exc}[/red]")
        raise typer.Exit(code=1)

    console.print(f"[green]Backup written:[/green] {backup.file}")
    console.print(f"Categories: {backup.data.counts.categories}")
    console.print(f"Blogs: {backup.data.counts.blogs}")


@app.command("validate-backup")
def validate_backup(
    backup_file: Annotated[Path, typer.Argument(help="Backup file to check")],
    verbose: VerboseOption = False,
):
    """Check a backup file's structure and counts."""
    setup_cli_logging("validate-backup", verbose=verbose)
    report = MigrationReport()

    try:
        BackupService.validate_backup(backup_file, report)
    except FileNotFoundError:
        console.print(f"[red]Backup file not found: {backup_file}[/red]")
        raise typer.Exit(code=2)
    except BackupValidationError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1)

    _print_messages("Warnings", report.warnings, "yellow")
    console.print(f"[green]Backup is valid:[/green] {backup_file}")


@app.command("validate")
def validate_migration(verbose: VerboseOption = False):
    """Compare source and target stores and report dangling category references."""
    logger = setup_cli_logging("validate", verbose=verbose)
    settings = get_settings()

    try:
        with connect_stores(settings) as (source, target):
            validation = MigrationValidationService(source, target).validate_migration()
    except ValueError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=2)
    except Exception as exc:  # noqa: BLE001 - report and exit non-zero
        logger.error(f"Validation failed: {exc}")
        console.print(f"[red]Validation failed: {exc}[/red]")
        raise typer.Exit(code=1)

    console.print(_validation_table(validation))
    _print_messages("Validation Issues", validation.issues, "red")
    if not validation.is_valid:
        raise typer.Exit(code=1)
