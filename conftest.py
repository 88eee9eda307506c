"""Shared pytest fixtures."""

import pytest

from config import parse_config
from log_archiver import InMemoryRemoteStore


@pytest.fixture
def log_dir(tmp_path):
    """Empty log directory."""
    directory = tmp_path / "logs"
    directory.mkdir()
    return directory


@pytest.fixture
def write_log(log_dir):
    """Create a file in the log directory with the given size."""
    def _write(name, size=128):
        path = log_dir / name
        path.write_bytes(b"x" * size)
        return path
    return _write


@pytest.fixture
def make_config(log_dir):
    """Build a Config pointing at the test log directory."""
    def _make(**local_overrides):
        local = {
            "log_directory": str(log_dir),
            "filename_pattern": "oempro-*.csv",
            "retention_days": 7,
        }
        local.update(local_overrides)
        return parse_config({
            "local": local,
            "remote": {
                "bucket": "test-bucket",
                "path_prefix": "pmta-logs",
                "account_id": "acct123",
                "access_key_id": "AKIATEST",
                "secret_access_key": "secret",
            },
            "retry": {
                "max_retries": 2,
                "initial_backoff_seconds": 1,
                "max_backoff_seconds": 3,
                "backoff_multiplier": 2,
            },
        })
    return _make


@pytest.fixture
def store():
    return InMemoryRemoteStore()
