"""Main CLI entry point - Root command group with global options."""

import click

from log_archiver import __version__


@click.group()
@click.option('--config', '-c', default='config.json', help='Configuration file path')
@click.option('--verbose', '-v', is_flag=True, help='Show debug logging on console')
@click.version_option(version=__version__, prog_name='Log Archiver')
@click.pass_context
def cli(ctx, config, verbose):
    """Log Archiver - move aged log files to S3-compatible storage.

    Files whose embedded date is older than the retention window are
    uploaded, verified by size, and only then deleted locally.

    Examples:
        # Write a configuration template
        python -m main config init

        # Check bucket access
        python -m main config test-connection

        # Archive old logs
        python -m main run

        # Show what is already archived
        python -m main list-remote
    """
    ctx.ensure_object(dict)
    ctx.obj['config_path'] = config
    ctx.obj['verbose'] = verbose


def register_all_commands():
    """Register all command modules with the main CLI."""
    from cli import archive_commands, config_commands

    config_commands.register_commands(cli)
    archive_commands.register_commands(cli)


# Register all commands when module is imported
register_all_commands()
