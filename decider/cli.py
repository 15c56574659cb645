import click
from flask import current_app
from flask.cli import with_appcontext

from .engine.sweep import tally_and_lock_expired


@click.command("lock-expired")
@with_appcontext
def lock_expired_command():
    """Tally and lock every voting decision whose lock time has passed."""
    locked = tally_and_lock_expired()
    current_app.logger.info("lock-expired locked %d decision(s)", len(locked))
    click.echo(f"Locked {len(locked)} decision(s)")
    for decision_id in locked:
        click.echo(f"  {decision_id}")


@click.command("init-db")
@with_appcontext
def init_db_command():
    """Create all tables (development; use `flask db upgrade` with migrations elsewhere)."""
    from .extensions import db
    db.create_all()
    click.echo("Database tables created")


def register_cli(app):
    app.cli.add_command(lock_expired_command)
    app.cli.add_command(init_db_command)
