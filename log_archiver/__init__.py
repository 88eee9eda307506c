"""Log Archiver.

Moves dated log files older than a retention window to an S3-compatible
bucket, deleting each local copy only after its upload has been verified.
"""

from .classifier import LogFile, extract_date, scan_directory
from .engine import ArchiveEngine, FailureStage, FileOutcome, OutcomeStatus, RunSummary
from .errors import (
    ArchiverError,
    ConfigError,
    ConnectivityError,
    DeletionError,
    NotFoundError,
    TransferError,
    UploadError,
    VerificationError,
)
from .memory_store import InMemoryRemoteStore
from .retention import cutoff_date, is_eligible
from .s3_store import S3RemoteStore
from .store import RemoteObject, RemoteStore, remote_key

__version__ = '1.0.0'
__all__ = [
    'ArchiveEngine',
    'RunSummary',
    'FileOutcome',
    'OutcomeStatus',
    'FailureStage',
    'LogFile',
    'extract_date',
    'scan_directory',
    'cutoff_date',
    'is_eligible',
    'RemoteStore',
    'RemoteObject',
    'remote_key',
    'S3RemoteStore',
    'InMemoryRemoteStore',
    'ArchiverError',
    'ConfigError',
    'ConnectivityError',
    'TransferError',
    'UploadError',
    'NotFoundError',
    'VerificationError',
    'DeletionError',
]
