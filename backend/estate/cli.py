# Overview: Flask CLI command groups for the record store, legacy migration and backups.

# backend/estate/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to "estate:create_app" (PowerShell: $env:FLASK_APP="estate:create_app").
# - Use: python -m flask <group> <command> [options]
#
# Record store:
# - python -m flask store init
#   Open the store (creates missing collections) and run the bootstrap sequence.
# - python -m flask store stats
#   Record counts per collection and the migration flag.
# - python -m flask store migrate-legacy --file estate_pro_final_v3.json [--force]
#   Import a legacy single-blob export into the record store.
#
# Backups:
# - python -m flask backup export --out estate-backup.json
#   Write the current state tree as a JSON backup envelope.
# - python -m flask backup restore estate-backup.json --yes
#   Replace all data with a backup (one undo step in a running session).
# - python -m flask backup reset --yes
#   DEV/TEST only: empty every collection, keeping settings.

import json

import click
from flask.cli import with_appcontext

from .catalog import OBJECT_STORES, MIGRATION_COMPLETE_KEY
from .engine import get_engine
from .services import backup_service, kv_store, record_store
from .services.bootstrap_service import BootstrapError, backfill_state
from .services.backup_service import BackupError
from .services.legacy_import import load_legacy_state
from .services.persistence_service import persist


@click.group('store')
def store_group():
    """Record store bootstrap and inspection commands."""


@store_group.command('init')
@with_appcontext
def init_store():
    """Run the bootstrap sequence against the configured database."""
    engine = get_engine()
    try:
        engine.bootstrap()
    except BootstrapError as exc:
        raise click.ClickException(f"Bootstrap failed: {exc}")
    click.echo(f"OK Store ready: {len(engine.state['customers'])} customers, "
               f"{len(engine.state['safes'])} safes")


@store_group.command('stats')
@with_appcontext
def store_stats():
    """Print record counts per collection."""
    record_store.open_store()
    for name in OBJECT_STORES:
        click.echo(f"{name:<16} {record_store.count_records(name)}")
    click.echo(f"{'migrated':<16} {bool(kv_store.get_value(MIGRATION_COMPLETE_KEY))}")


@store_group.command('migrate-legacy')
@click.option('--file', 'path', required=True, type=click.Path(exists=True, dir_okay=False),
              help='Legacy JSON blob')
@click.option('--force', is_flag=True, help='Import even if the migration flag is already set')
@with_appcontext
def migrate_legacy(path, force):
    """Import a legacy single-blob export and mark the migration complete."""
    record_store.open_store()
    # Bootstrap sets the flag on an empty store too; only imported customers block a rerun
    migrated = kv_store.get_value(MIGRATION_COMPLETE_KEY) and record_store.count_records("customers")
    if migrated and not force:
        raise click.ClickException("Migration already complete (use --force to import anyway)")

    with open(path, "r", encoding="utf-8") as fh:
        state = load_legacy_state(fh.read())
    if state is None:
        raise click.ClickException("No usable legacy data in file")

    backfill_state(state)
    if not persist(state):
        raise click.ClickException("Failed to write migrated data; see log")
    kv_store.set_value(MIGRATION_COMPLETE_KEY, True)
    engine = get_engine()
    if engine.ready:
        engine.reload()
    click.echo(f"OK Migrated {backup_service.total_records(state)} records")


@click.group('backup')
def backup_group():
    """JSON backup and restore commands."""


@backup_group.command('export')
@click.option('--out', 'out_path', required=True, type=click.Path(dir_okay=False, writable=True))
@with_appcontext
def export_backup(out_path):
    """Write the current state as a backup envelope."""
    engine = get_engine()
    if not engine.ready:
        engine.bootstrap()
    envelope = backup_service.export_backup(engine.snapshot()["state"])
    with open(out_path, "w", encoding="utf-8") as fh:
        json.dump(envelope, fh, ensure_ascii=False, indent=2)
    click.echo(f"OK Wrote {envelope['totalRecords']} records to {out_path}")


@backup_group.command('restore')
@click.argument('path', type=click.Path(exists=True, dir_okay=False))
@click.option('--yes', is_flag=True, help='Confirm replacing all data')
@with_appcontext
def restore_backup(path, yes):
    """Replace all data with a backup file."""
    if not yes:
        raise click.ClickException("Refusing to replace all data without --yes")
    engine = get_engine()
    if not engine.ready:
        engine.bootstrap()
    with open(path, "r", encoding="utf-8") as fh:
        try:
            state = backup_service.restore_backup(engine, fh.read())
        except BackupError as exc:
            raise click.ClickException(str(exc))
    click.echo(f"OK Restored {backup_service.total_records(state)} records")


@backup_group.command('reset')
@click.option('--yes', is_flag=True, help='Confirm deleting all data')
@with_appcontext
def reset_data(yes):
    """Empty every collection, keeping settings."""
    if not yes:
        raise click.ClickException("Refusing to delete all data without --yes")
    engine = get_engine()
    if not engine.ready:
        engine.bootstrap()
    backup_service.reset_all(engine)
    click.echo("OK All data cleared")


def register_commands(app):
    app.cli.add_command(store_group)
    app.cli.add_command(backup_group)
