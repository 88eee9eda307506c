"""Find candidate log files and read the date embedded in their names."""

import logging
import re
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import List, Optional

logger = logging.getLogger(__name__)

DATE_PATTERN = re.compile(r'\d{4}-\d{2}-\d{2}')


@dataclass(frozen=True)
class LogFile:
    """Snapshot of a local log file taken at scan time."""
    path: Path
    filename: str
    size_bytes: int
    embedded_date: Optional[str] = None

    @property
    def year_month(self) -> Optional[str]:
        if self.embedded_date is None:
            return None
        return self.embedded_date[:7]


def extract_date(filename: str) -> Optional[str]:
    """Return the first YYYY-MM-DD substring of a filename.

    Only the first match is considered. A match that is not a real calendar
    date (month 13, day 40, ...) makes the file unparseable.

    Returns:
        Canonical date string, or None if the name carries no usable date
    """
    match = DATE_PATTERN.search(filename)
    if not match:
        return None

    value = match.group(0)
    try:
        datetime.strptime(value, '%Y-%m-%d')
    except ValueError:
        logger.debug(f"Ignoring invalid date {value} in {filename}")
        return None
    return value


def scan_directory(directory: Path, pattern: str) -> List[LogFile]:
    """List regular files in directory matching a glob pattern.

    The scan is not recursive. Hidden files are ignored unless the pattern
    itself starts with a dot, as a shell glob would. Results are sorted by
    filename so that runs are reproducible.

    Paths are made absolute without following symlinks, so deleting a
    LogFile removes the directory entry and never a link target.
    """
    directory = Path(directory)
    include_hidden = pattern.startswith('.')
    files = []

    for path in sorted(directory.glob(pattern), key=lambda p: p.name):
        if path.name.startswith('.') and not include_hidden:
            continue
        if not path.is_file():
            continue
        files.append(LogFile(
            path=path.absolute(),
            filename=path.name,
            size_bytes=path.stat().st_size,
            embedded_date=extract_date(path.name),
        ))

    logger.debug(f"Scanned {directory} for {pattern}: {len(files)} file(s)")
    return files
