"""
Tests for the blog-migrate CLI commands.
"""
import json

import pytest
from sqlalchemy import create_engine, inspect
from sqlmodel import Session
from typer.testing import CliRunner

from blogmigrate import __version__
from blogmigrate.cli.cli import app
from blogmigrate.core.database import create_store_engine, init_store
from blogmigrate.stores import open_sql_store

runner = CliRunner()


@pytest.fixture()
def cli_env(tmp_path, monkeypatch):
    """Point the CLI at SQLite files inside tmp_path."""
    source_url = f"sqlite:///{tmp_path / 'source.db'}"
    target_url = f"sqlite:///{tmp_path / 'target.db'}"
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("BLOG_SOURCE_DB_URI", source_url)
    monkeypatch.setenv("DATABASE_URL", target_url)
    monkeypatch.setenv("MIGRATION_BACKUP_DIR", str(tmp_path / "backups"))
    monkeypatch.setenv("LOG_DIR", str(tmp_path / "logs"))
    monkeypatch.setenv("ENVIRONMENT", "development")

    engine = create_store_engine(source_url)
    init_store(engine)
    with Session(engine) as session:
        store = open_sql_store(session, "source")
        category = store.categories.create({"name": "Python"})
        store.blogs.create({"title": "Hello", "subtitle": "World", "category_id": category.id})
    engine.dispose()
    return tmp_path


def test_version():
    result = runner.invoke(app, ["version"])

    assert result.exit_code == 0
    assert __version__ in result.stdout


def test_run_migrates_and_writes_report(cli_env):
    result = runner.invoke(app, ["migrate", "run", "--yes"])

    assert result.exit_code == 0, result.stdout
    assert "Migration completed successfully" in result.stdout
    reports = list((cli_env / "backups").glob("migration-report-*.json"))
    assert len(reports) == 1
    assert json.loads(reports[0].read_text(encoding="utf-8"))["blogs_migrated"] == 1
    assert (cli_env / "logs" / "migrate.log").exists()


def test_run_requires_store_urls(cli_env, monkeypatch):
    monkeypatch.delenv("BLOG_SOURCE_DB_URI")

    result = runner.invoke(app, ["migrate", "run", "--yes"])

    assert result.exit_code == 2
    assert "BLOG_SOURCE_DB_URI" in result.stdout


def test_run_in_production_can_be_cancelled(cli_env, monkeypatch):
    monkeypatch.setenv("ENVIRONMENT", "production")

    result = runner.invoke(app, ["migrate", "run"], input="n\n")

    assert result.exit_code == 0
    assert "Migration cancelled" in result.stdout
    assert not (cli_env / "backups").exists()


def test_rollback_after_run(cli_env):
    runner.invoke(app, ["migrate", "run", "--yes"])

    result = runner.invoke(app, ["migrate", "rollback", "--yes"])

    assert result.exit_code == 0, result.stdout
    assert "Blogs restored: 0" in result.stdout


def test_backup_then_validate(cli_env):
    backup = runner.invoke(app, ["migrate", "backup"])
    assert backup.exit_code == 0, backup.stdout

    backup_file = next((cli_env / "backups").glob("source-backup-*.json"))
    result = runner.invoke(app, ["migrate", "validate-backup", str(backup_file)])

    assert result.exit_code == 0
    assert "Backup is valid" in result.stdout


def test_validate_backup_rejects_bad_file(cli_env):
    bad = cli_env / "bad.json"
    bad.write_text(json.dumps({"timestamp": "2024-01-01T00:00:00.000Z", "categories": []}))

    result = runner.invoke(app, ["migrate", "validate-backup", str(bad)])

    assert result.exit_code == 1
    assert "Invalid backup file structure" in result.stdout


def test_validate_backup_missing_file(cli_env):
    result = runner.invoke(app, ["migrate", "validate-backup", str(cli_env / "nope.json")])

    assert result.exit_code == 2


def test_validate_reports_clean_target(cli_env):
    runner.invoke(app, ["migrate", "run", "--yes"])

    result = runner.invoke(app, ["migrate", "validate"])

    assert result.exit_code == 0
    assert "Valid" in result.stdout


def test_validate_connection_failure_exits_cleanly(cli_env, monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "nosuchdialect://db.example.com/blog")

    result = runner.invoke(app, ["migrate", "validate"])

    assert result.exit_code == 1
    assert "Validation failed" in result.stdout
    assert isinstance(result.exception, SystemExit)


def test_validate_does_not_create_target_tables(cli_env):
    result = runner.invoke(app, ["migrate", "validate"])

    assert result.exit_code == 1
    engine = create_engine(f"sqlite:///{cli_env / 'target.db'}")
    try:
        assert inspect(engine).get_table_names() == []
    finally:
        engine.dispose()
