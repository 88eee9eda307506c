"""In-memory remote store for tests and local development.

Objects live in a dict keyed by object key and are lost on process exit.
Failure injection hooks let tests drive every branch of the per-file state
machine without a network.
"""

import logging
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Set

from .errors import ConnectivityError, NotFoundError, UploadError
from .store import RemoteObject

logger = logging.getLogger(__name__)


class InMemoryRemoteStore:
    """RemoteStore backed by a dict.

    Attributes:
        reachable: When False, check_connection and stat raise ConnectivityError
        bucket_exists: When False, check_connection fails unless asked to create it
        fail_puts: Keys whose upload raises UploadError
        drop_after_put: Keys that are accepted by put but never stored
        size_overrides: Keys whose reported size differs from what was stored
        put_calls: Keys passed to put, in call order
        stat_calls: Keys passed to stat, in call order
    """

    def __init__(self, reachable: bool = True, bucket_exists: bool = True):
        self.reachable = reachable
        self.bucket_exists = bucket_exists
        self.objects: Dict[str, bytes] = {}
        self.fail_puts: Set[str] = set()
        self.drop_after_put: Set[str] = set()
        self.size_overrides: Dict[str, int] = {}
        self.put_calls: List[str] = []
        self.stat_calls: List[str] = []

    def check_connection(self, create_missing: bool = False) -> None:
        if not self.reachable:
            raise ConnectivityError("In-memory store marked unreachable")
        if not self.bucket_exists:
            if not create_missing:
                raise ConnectivityError("Bucket not found")
            self.bucket_exists = True

    def put(self, local_path: Path, key: str) -> None:
        self.put_calls.append(key)
        if key in self.fail_puts:
            raise UploadError(key, "injected failure")
        try:
            data = Path(local_path).read_bytes()
        except OSError as e:
            raise UploadError(key, str(e)) from e
        if key in self.drop_after_put:
            logger.debug(f"Dropping {key} after put")
            return
        self.objects[key] = data

    def stat(self, key: str) -> RemoteObject:
        self.stat_calls.append(key)
        if not self.reachable:
            raise ConnectivityError(f"Cannot stat {key}: store unreachable")
        if key not in self.objects:
            raise NotFoundError(key)
        size = self.size_overrides.get(key, len(self.objects[key]))
        return RemoteObject(key=key, size_bytes=size)

    def list(self, prefix: str) -> Iterator[RemoteObject]:
        for key in sorted(self.objects):
            if key.startswith(prefix):
                yield self.stat(key)

    def get(self, key: str) -> Optional[bytes]:
        """Return stored bytes for a key, or None."""
        return self.objects.get(key)
