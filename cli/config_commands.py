"""Configuration management commands."""

from pathlib import Path

import click

from config import create_default_config
from cli.utils import (
    get_store,
    load_app_config,
    setup_logging,
    handle_error
)


def register_commands(cli):
    """Register config commands with main CLI."""

    @cli.group('config')
    @click.pass_context
    def config_group(ctx):
        """Configuration management commands.

        Initialize and test the archiver configuration.
        """
        pass

    @config_group.command('init')
    @click.option('--force', is_flag=True, help='Overwrite an existing file without asking')
    @click.pass_context
    def init_config(ctx, force):
        """Create a default configuration file.

        Examples:
            # Create default config.json
            python -m main config init

            # Create config at custom location
            python -m main --config /etc/log-archiver/config.json config init
        """
        config_path = ctx.obj['config_path']

        if Path(config_path).exists() and not force:
            click.echo(f"Configuration file already exists: {config_path}")
            if not click.confirm("Overwrite existing configuration?"):
                return

        create_default_config(config_path)
        click.echo(f"✓ Created configuration file: {config_path}")
        click.echo("\nNext steps:")
        click.echo("  1. Set the log directory and retention window")
        click.echo("  2. Fill in bucket, account id and access keys")
        click.echo("  3. Test the configuration with: python -m main config test-connection")

    @config_group.command('test-connection')
    @click.pass_context
    def test_connection(ctx):
        """Test access to the remote bucket.

        Creates the bucket if it does not exist yet.
        """
        config_path = ctx.obj['config_path']
        verbose = ctx.obj['verbose']

        try:
            config = load_app_config(config_path)
            setup_logging(config, verbose)

            store = get_store(config)
            store.check_connection(create_missing=True)
            click.echo(f"✓ Remote connection successful: {config.remote.bucket}")

        except Exception as e:
            handle_error(e, verbose)
