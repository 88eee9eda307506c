"""Remote store protocol and object key layout.

Every backend must provide the same four operations. ``put`` owns its own
retry policy; the engine only ever sees a final success or an UploadError.

Key layout (load-bearing for objects already in the bucket):
    {path_prefix}/{YYYY-MM}/{filename}
where YYYY-MM comes from the date embedded in the filename, never from the
upload time.
"""

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Iterator, Optional, Protocol, runtime_checkable

from .classifier import LogFile


@dataclass(frozen=True)
class RemoteObject:
    """An object as observed in the remote store."""
    key: str
    size_bytes: int
    exists: bool = True
    etag: Optional[str] = None
    last_modified: Optional[datetime] = None


@runtime_checkable
class RemoteStore(Protocol):
    """Capabilities the archive engine needs from an object store."""

    def check_connection(self, create_missing: bool = False) -> None:
        """Raise ConnectivityError if the store cannot be used.

        A missing bucket is an error unless create_missing is set.
        """
        ...

    def put(self, local_path: Path, key: str) -> None:
        """Upload a local file, raising UploadError once retries run out."""
        ...

    def stat(self, key: str) -> RemoteObject:
        """Return object metadata, raising NotFoundError for a missing key."""
        ...

    def list(self, prefix: str) -> Iterator[RemoteObject]:
        """Yield every object under prefix."""
        ...


def remote_key(path_prefix: str, log_file: LogFile) -> str:
    """Build the object key for a log file.

    Raises:
        ValueError: if the file has no embedded date
    """
    if log_file.embedded_date is None:
        raise ValueError(f"No embedded date in {log_file.filename}")

    prefix = path_prefix.strip('/')
    if prefix:
        return f"{prefix}/{log_file.year_month}/{log_file.filename}"
    return f"{log_file.year_month}/{log_file.filename}"
