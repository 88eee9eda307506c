"""Shared utilities for CLI commands."""

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Optional

import click

from config import Config, load_config
from log_archiver import S3RemoteStore


def load_app_config(config_path: str) -> Config:
    """Load application configuration.

    Raises:
        ConfigError: If configuration cannot be loaded
    """
    return load_config(config_path)


def get_store(config: Config, show_progress: bool = False) -> S3RemoteStore:
    """Build the remote store described by the configuration."""
    return S3RemoteStore(config.remote, config.retry, show_progress=show_progress)


def setup_logging(config: Optional[Config], verbose: bool = False):
    """Log to a rotating file and to the console.

    Args:
        config: Application configuration, or None for console-only logging
        verbose: Whether to show debug output on the console
    """
    root_logger = logging.getLogger()
    root_logger.handlers = []
    root_logger.setLevel(logging.DEBUG)

    formatter = logging.Formatter('[%(asctime)s] %(levelname)s: %(message)s',
                                  datefmt='%Y-%m-%d %H:%M:%S')

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if config is not None:
        log_file = Path(config.logging.file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=config.logging.max_bytes,
            backupCount=config.logging.backup_count
        )
        file_handler.setLevel(getattr(logging, config.logging.level.upper(), logging.INFO))
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    # Quiet the AWS libraries
    for name in ('boto3', 'botocore', 's3transfer', 'urllib3'):
        logging.getLogger(name).setLevel(logging.WARNING)


def handle_error(error: Exception, verbose: bool = False):
    """Handle and display errors consistently.

    Args:
        error: Exception to handle
        verbose: Whether to show full traceback
    """
    click.echo(f"Error: {error}", err=True)
    if verbose:
        import traceback
        click.echo(traceback.format_exc(), err=True)
    sys.exit(1)
