"""Exceptions raised by the log archiver."""


class ArchiverError(Exception):
    """Base error for the log archiver."""


class ConfigError(ArchiverError):
    """Configuration is missing, invalid, or points at a missing directory."""


class ConnectivityError(ArchiverError):
    """Remote store unreachable or credentials rejected."""


class TransferError(ArchiverError):
    """Transfer to the remote store failed."""


class UploadError(TransferError):
    """Upload failed after the store's internal retries."""

    def __init__(self, key: str, message: str, attempts: int = 1):
        super().__init__(f"Upload of {key} failed after {attempts} attempt(s): {message}")
        self.key = key
        self.attempts = attempts


class NotFoundError(ArchiverError):
    """Object does not exist in the remote store."""

    def __init__(self, key: str):
        super().__init__(f"Object not found: {key}")
        self.key = key


class VerificationError(ArchiverError):
    """Remote copy missing or not the same size as the local file."""

    def __init__(self, key: str, reason: str, local_size: int = 0, remote_size: int = 0):
        super().__init__(f"Verification failed for {key}: {reason}")
        self.key = key
        self.reason = reason
        self.local_size = local_size
        self.remote_size = remote_size


class DeletionError(ArchiverError):
    """Local file could not be removed after its remote copy was verified."""
