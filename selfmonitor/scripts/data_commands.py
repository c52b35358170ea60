"""CLI commands for exporting, importing, resetting and inspecting stored state.

Usage:
    flask state-status
    flask state-export                       # writes selfmonitor-backup-YYYY-MM-DD.json
    flask state-export --out backup.json
    flask state-import backup.json
    flask state-reset --yes
    flask state-restore-backup
    flask state-migrations
"""

from __future__ import annotations

from pathlib import Path

import click
from flask import current_app
from flask.cli import with_appcontext

from selfmonitor.core.storage.errors import MalformedDocument, MigrationFailure


def _service():
    return current_app.extensions["state_service"]


@click.command("state-status")
@with_appcontext
def state_status_command():
    """Show schema versions, backup presence and approximate size."""
    status = _service().status()
    click.echo(f"Current schema version: {status.current_version}")
    click.echo(f"Stored schema version:  {status.stored_version}")
    click.echo(f"Backup present:         {'yes' if status.has_backup else 'no'}")
    click.echo(f"Approximate size:       {status.approximate_size_kb} KB")


@click.command("state-export")
@click.option("--out", "-o", "out_path", type=click.Path(dir_okay=False, path_type=Path), help="Output file")
@with_appcontext
def state_export_command(out_path: Path | None):
    """Write the live aggregate as a versioned export file."""
    service = _service()
    target = out_path or Path(service.export_filename())
    target.write_text(service.export_data(), encoding="utf-8")
    click.echo(f"✓ Exported to {target}")


@click.command("state-import")
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@with_appcontext
def state_import_command(path: Path):
    """Replace the live aggregate with an exported (or legacy) file."""
    try:
        state = _service().import_data(path.read_bytes())
    except MalformedDocument as exc:
        raise click.ClickException(f"invalid file: {exc}") from exc
    except MigrationFailure as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(f"✓ Imported {len(state.get('tasks') or [])} tasks from {path}")


@click.command("state-reset")
@click.option("--yes", is_flag=True, help="Skip the confirmation prompt")
@with_appcontext
def state_reset_command(yes: bool):
    """Wipe stored state back to defaults (the pre-migration backup is kept)."""
    if not yes:
        click.confirm("This deletes all stored data. Continue?", abort=True)
    _service().reset()
    click.echo("✓ State reset to defaults")


@click.command("state-restore-backup")
@with_appcontext
def state_restore_backup_command():
    """Adopt the pre-migration backup as the live aggregate."""
    if _service().restore_backup() is None:
        raise click.ClickException("no backup available")
    click.echo("✓ Backup restored")


@click.command("state-migrations")
@with_appcontext
def state_migrations_command():
    """List registered schema migrations."""
    registry = _service().gateway.registry
    for version, description in registry.describe():
        click.echo(f"v{version}: {description}")


def register_commands(app):
    """Register CLI commands with the app."""
    app.cli.add_command(state_status_command)
    app.cli.add_command(state_export_command)
    app.cli.add_command(state_import_command)
    app.cli.add_command(state_reset_command)
    app.cli.add_command(state_restore_backup_command)
    app.cli.add_command(state_migrations_command)
