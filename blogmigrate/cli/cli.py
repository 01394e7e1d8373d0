"""
Main CLI application using Typer.

Entry point: python -m blogmigrate.cli
CLI Name: blog-migrate
"""
import typer

from blogmigrate import __version__ as app_version
from blogmigrate.cli.commands import migrate

app = typer.Typer(
    name="blog-migrate",
    help="Blog migration tools - move categories and posts between stores and check the result",
)

@app.command()
def version():
    """Show CLI version information."""
    typer.echo(f"blog-migrate version {app_version}")

# Register command groups


app.add_typer(migrate.app, name="migrate")
