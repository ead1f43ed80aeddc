"""CLI commands for scheduled and administrative tasks.

Run through Flask's CLI, e.g. from cron every hour:

    0 * * * * cd /path/to/taps && flask --app taps send-reminders
"""

import sys

import click
from flask.cli import with_appcontext

from taps.models import init_db
from taps.services import get_workflow


@click.command('send-reminders')
@with_appcontext
def send_reminders_command():
    """Send overdue department reminder emails."""
    click.echo("Starting reminder email process...")
    result = get_workflow().send_reminder_sweep()
    if result.success:
        sent = result.data.get('sent', {})
        click.echo("Reminder emails processed successfully: " +
                   ", ".join(f"{dept}={count}" for dept, count in sent.items()))
        return
    click.echo(f"Failed to process reminder emails: {result.message}", err=True)
    sys.exit(1)


@click.command('init-db')
@with_appcontext
def init_db_command():
    """Create database tables."""
    init_db()
    click.echo("Database tables initialized")


def register_commands(app):
    app.cli.add_command(send_reminders_command)
    app.cli.add_command(init_db_command)
