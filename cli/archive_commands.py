"""Archive commands: run a pass and inspect what is already archived."""

import sys

import click
from tabulate import tabulate

from cli.utils import (
    get_store,
    load_app_config,
    setup_logging,
    handle_error
)
from log_archiver import ArchiveEngine
from log_archiver.engine import format_size


def register_commands(cli):
    """Register archive commands with main CLI."""

    @cli.command('run')
    @click.option('--progress', is_flag=True, help='Show a progress bar for each upload')
    @click.pass_context
    def run(ctx, progress):
        """Archive log files older than the retention window.

        Each eligible file is uploaded, its remote size checked against the
        local size, and only then removed from disk. Exits non-zero if any
        file failed.

        Examples:
            python -m main run
            python -m main --config /etc/log-archiver/config.json run
        """
        config_path = ctx.obj['config_path']
        verbose = ctx.obj['verbose']

        try:
            config = load_app_config(config_path)
            setup_logging(config, verbose)

            engine = ArchiveEngine(config, get_store(config, show_progress=progress))
            summary = engine.run()

        except Exception as e:
            handle_error(e, verbose)
            return

        click.echo(f"\nArchived:     {summary.archived_count} files ({format_size(summary.archived_bytes)})")
        click.echo(f"Failed:       {summary.failed_count} files")
        click.echo(f"Kept locally: {summary.kept_count} files")
        click.echo(f"Skipped:      {summary.skipped_count} files")

        if summary.failures():
            click.echo("\nFailures:", err=True)
            for outcome in summary.failures():
                click.echo(f"  {outcome.filename} [{outcome.stage.value}]: {outcome.reason}", err=True)

        if not summary.success:
            sys.exit(1)

    @cli.command('list-remote')
    @click.option('--prefix', help='Key prefix to list (default: configured path prefix)')
    @click.pass_context
    def list_remote(ctx, prefix):
        """List archived files in the remote bucket.

        Examples:
            python -m main list-remote
            python -m main list-remote --prefix pmta-logs/2024-01
        """
        config_path = ctx.obj['config_path']
        verbose = ctx.obj['verbose']

        try:
            config = load_app_config(config_path)
            setup_logging(config, verbose)

            if prefix is None:
                prefix = config.remote.path_prefix.strip('/')
                prefix = f"{prefix}/" if prefix else ''

            store = get_store(config)
            objects = list(store.list(prefix))

        except Exception as e:
            handle_error(e, verbose)
            return

        if not objects:
            click.echo(f"No archived files found under: {prefix or '/'}")
            return

        headers = ['Key', 'Size', 'Last Modified']
        table_data = [
            [obj.key, format_size(obj.size_bytes),
             obj.last_modified.strftime('%Y-%m-%d %H:%M') if obj.last_modified else '']
            for obj in objects
        ]
        click.echo(tabulate(table_data, headers=headers, tablefmt='grid'))

        total = sum(obj.size_bytes for obj in objects)
        click.echo(f"\nTotal: {len(objects)} file(s), {format_size(total)}\n")
