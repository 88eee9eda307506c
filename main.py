#!/usr/bin/env python3
"""Log Archiver - CLI entry point.

Examples:
    # Get help
    python -m main --help

    # Basic workflow
    python -m main config init             # Write config.json template
    python -m main config test-connection  # Check bucket access
    python -m main run                     # Archive old logs
    python -m main list-remote             # Show archived files
"""

from cli.main import cli

if __name__ == '__main__':
    cli()
