"""Archive engine - one verified archival pass over the local log directory.

Per eligible file the engine runs upload -> verify -> delete, strictly in that
order and one file at a time. The local copy is removed only after ``stat``
on its remote key reported the same size as the file on disk. Any failure
before that point leaves the file where it is, so the next run simply
picks it up again.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, List, Optional, Union

from .classifier import LogFile, scan_directory
from .errors import (
    ConfigError,
    ConnectivityError,
    DeletionError,
    NotFoundError,
    UploadError,
    VerificationError,
)
from .retention import cutoff_date, is_eligible
from .store import RemoteStore, remote_key

if TYPE_CHECKING:
    from config import Config

logger = logging.getLogger(__name__)


def format_size(bytes_size: int) -> str:
    """Format bytes as human-readable size."""
    if bytes_size == 0:
        return "0 B"
    for unit in ['B', 'KB', 'MB', 'GB', 'TB']:
        if bytes_size < 1024.0:
            return f"{bytes_size:.2f} {unit}"
        bytes_size /= 1024.0
    return f"{bytes_size:.2f} PB"


class OutcomeStatus(str, Enum):
    KEPT = 'kept'
    SKIPPED = 'skipped'
    ARCHIVED = 'archived'
    FAILED = 'failed'


class FailureStage(str, Enum):
    UPLOAD = 'upload'
    VERIFY = 'verify'
    DELETE = 'delete'


@dataclass
class FileOutcome:
    """What happened to one file during a run."""
    log_file: LogFile
    status: OutcomeStatus
    stage: Optional[FailureStage] = None
    reason: Optional[str] = None
    remote_key: Optional[str] = None

    @property
    def filename(self) -> str:
        return self.log_file.filename


@dataclass
class RunSummary:
    """Aggregated result of one run."""
    cutoff: Optional[date] = None
    archived_count: int = 0
    archived_bytes: int = 0
    failed_count: int = 0
    delete_failed_count: int = 0
    kept_count: int = 0
    skipped_count: int = 0
    outcomes: List[FileOutcome] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.failed_count == 0

    def record(self, outcome: FileOutcome) -> None:
        self.outcomes.append(outcome)
        if outcome.status == OutcomeStatus.ARCHIVED:
            self.archived_count += 1
            self.archived_bytes += outcome.log_file.size_bytes
        elif outcome.status == OutcomeStatus.FAILED:
            self.failed_count += 1
            if outcome.stage == FailureStage.DELETE:
                self.delete_failed_count += 1
        elif outcome.status == OutcomeStatus.KEPT:
            self.kept_count += 1
        elif outcome.status == OutcomeStatus.SKIPPED:
            self.skipped_count += 1

    def failures(self) -> List[FileOutcome]:
        return [o for o in self.outcomes if o.status == OutcomeStatus.FAILED]


class ArchiveEngine:
    """Moves aged log files to a remote store, deleting only verified copies."""

    def __init__(self, config: 'Config', store: RemoteStore):
        self.config = config
        self.store = store

    def preflight(self) -> None:
        """Fail fast before any file is touched.

        Raises:
            ConfigError: log directory missing
            ConnectivityError: remote store unusable
        """
        log_dir = Path(self.config.local.log_directory)
        if not log_dir.is_dir():
            raise ConfigError(f"Log directory does not exist: {log_dir}")
        self.store.check_connection(create_missing=False)

    def run(self, now: Union[date, datetime, None] = None) -> RunSummary:
        """Execute one archival pass.

        Args:
            now: Current time; defaults to the local clock

        Returns:
            RunSummary; ``summary.success`` is False if any file failed
        """
        if now is None:
            now = datetime.now()

        local = self.config.local
        logger.info("=" * 42)
        logger.info("Starting log archival process")
        logger.info("=" * 42)

        self.preflight()

        cutoff = cutoff_date(now, local.retention_days)
        summary = RunSummary(cutoff=cutoff)
        logger.info(f"Cutoff date: {cutoff.isoformat()}")
        logger.info(f"Files older than {cutoff.isoformat()} will be archived")
        logger.info(f"Log directory: {local.log_directory}")
        logger.info(f"File pattern: {local.filename_pattern}")

        files = scan_directory(Path(local.log_directory), local.filename_pattern)
        if not files:
            logger.info("No files matching pattern found")
            self._log_summary(summary)
            return summary

        logger.info(f"Found {len(files)} files to process")

        for log_file in files:
            summary.record(self._process(log_file, cutoff))

        self._log_summary(summary)
        return summary

    def _process(self, log_file: LogFile, cutoff: date) -> FileOutcome:
        if log_file.embedded_date is None:
            logger.info(f"SKIP: Cannot extract date from {log_file.filename}")
            return FileOutcome(log_file, OutcomeStatus.SKIPPED, reason='unparseable')

        if not is_eligible(log_file.embedded_date, cutoff):
            logger.info(f"KEEP: {log_file.filename} (date: {log_file.embedded_date})")
            return FileOutcome(log_file, OutcomeStatus.KEPT)

        key = remote_key(self.config.remote.path_prefix, log_file)
        logger.info(
            f"ARCHIVE: {log_file.filename} ({format_size(log_file.size_bytes)}, "
            f"date: {log_file.embedded_date})"
        )
        return self._archive(log_file, key)

    def _archive(self, log_file: LogFile, key: str) -> FileOutcome:
        """Upload, verify and delete one file."""
        stage = FailureStage.UPLOAD
        try:
            logger.info(f"Uploading: {log_file.filename} -> {self.config.remote.bucket}/{key}")
            self.store.put(log_file.path, key)

            stage = FailureStage.VERIFY
            self._verify(log_file, key)

            stage = FailureStage.DELETE
            self._delete(log_file)

        except UploadError as e:
            logger.error(f"FAILED: Upload failed for {log_file.filename}: {e}")
            return FileOutcome(log_file, OutcomeStatus.FAILED, FailureStage.UPLOAD, str(e), key)
        except VerificationError as e:
            logger.error(f"FAILED: Verification failed for {log_file.filename}: {e}")
            return FileOutcome(log_file, OutcomeStatus.FAILED, FailureStage.VERIFY, e.reason, key)
        except DeletionError as e:
            logger.critical(
                f"FAILED: {log_file.filename} is verified at {key} but could not be "
                f"deleted locally: {e}. Remove the local copy by hand."
            )
            return FileOutcome(log_file, OutcomeStatus.FAILED, FailureStage.DELETE, str(e), key)
        except Exception as e:
            logger.exception(f"FAILED: Unexpected error during {stage.value} of {log_file.filename}")
            return FileOutcome(log_file, OutcomeStatus.FAILED, stage, str(e), key)

        logger.info(f"COMPLETED: {log_file.filename} archived and removed")
        return FileOutcome(log_file, OutcomeStatus.ARCHIVED, remote_key=key)

    def _verify(self, log_file: LogFile, key: str) -> None:
        try:
            remote = self.store.stat(key)
        except NotFoundError as e:
            raise VerificationError(key, 'not-found') from e
        except ConnectivityError as e:
            raise VerificationError(key, f'stat-failed: {e}') from e

        try:
            local_size = log_file.path.stat().st_size
        except OSError as e:
            raise VerificationError(key, f'local-unreadable: {e}') from e

        if local_size != remote.size_bytes:
            logger.error(f"Size mismatch: local={local_size}, remote={remote.size_bytes}")
            raise VerificationError(key, 'size-mismatch', local_size, remote.size_bytes)

        logger.info(f"Verified: sizes match ({local_size} bytes)")

    def _delete(self, log_file: LogFile) -> None:
        try:
            log_file.path.unlink()
        except FileNotFoundError:
            logger.debug(f"Already deleted or missing: {log_file.path}")
        except OSError as e:
            raise DeletionError(f"{log_file.path}: {e}") from e

    def _log_summary(self, summary: RunSummary) -> None:
        logger.info("=" * 42)
        logger.info("Archival Summary")
        logger.info("=" * 42)
        logger.info(f"  Archived:     {summary.archived_count} files ({format_size(summary.archived_bytes)})")
        logger.info(f"  Failed:       {summary.failed_count} files")
        logger.info(f"  Kept locally: {summary.kept_count} files")
        logger.info(f"  Skipped:      {summary.skipped_count} files")
        if summary.delete_failed_count:
            logger.critical(
                f"  {summary.delete_failed_count} verified file(s) could not be deleted locally"
            )
        logger.info("=" * 42)
