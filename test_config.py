"""Tests for configuration loading and validation."""

import json
import os
import stat

import pytest
from pydantic import ValidationError

from config import Config, create_default_config, load_config, parse_config
from log_archiver import ConfigError


def valid_data(log_dir):
    return {
        "local": {"log_directory": str(log_dir)},
        "remote": {
            "bucket": "logs",
            "account_id": "acct",
            "access_key_id": "key",
            "secret_access_key": "secret",
        },
    }


def write_json(path, data):
    path.write_text(json.dumps(data))
    return path


def test_defaults_match_original_tool(tmp_path):
    config = parse_config(valid_data(tmp_path))

    assert config.local.filename_pattern == "oempro-*.csv"
    assert config.local.retention_days == 7
    assert config.remote.path_prefix == "pmta-logs"
    assert config.retry.max_retries == 3
    assert config.logging.level == "INFO"


def test_config_is_immutable(tmp_path):
    config = parse_config(valid_data(tmp_path))

    with pytest.raises(ValidationError):
        config.local.retention_days = 1


def test_load_from_file(tmp_path):
    path = write_json(tmp_path / "config.json", valid_data(tmp_path))

    config = load_config(str(path))

    assert isinstance(config, Config)
    assert config.remote.bucket == "logs"


def test_missing_file(tmp_path):
    with pytest.raises(ConfigError, match="not found"):
        load_config(str(tmp_path / "nope.json"))


def test_invalid_json(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("{not json")

    with pytest.raises(ConfigError, match="Invalid JSON"):
        load_config(str(path))


@pytest.mark.parametrize("section, field", [
    ("remote", "bucket"),
    ("remote", "account_id"),
    ("remote", "access_key_id"),
    ("remote", "secret_access_key"),
    ("local", "log_directory"),
])
def test_missing_required_field(tmp_path, section, field):
    data = valid_data(tmp_path)
    del data[section][field]

    with pytest.raises(ConfigError, match=field):
        parse_config(data)


def test_empty_required_field(tmp_path):
    data = valid_data(tmp_path)
    data["remote"]["bucket"] = "  "

    with pytest.raises(ConfigError, match="bucket"):
        parse_config(data)


@pytest.mark.parametrize('pattern', ["/var/log/*.csv", "**/*.csv", "sub/*.csv", "sub\\*.csv"])
def test_filename_pattern_must_not_leave_log_directory(tmp_path, pattern):
    data = valid_data(tmp_path)
    data["local"]["filename_pattern"] = pattern

    with pytest.raises(ConfigError, match="filename_pattern"):
        parse_config(data)


def test_filename_pattern_allows_plain_globs(tmp_path):
    data = valid_data(tmp_path)
    data["local"]["filename_pattern"] = "pmta-acct-*.csv"

    assert parse_config(data).local.filename_pattern == "pmta-acct-*.csv"


def test_negative_retention(tmp_path):
    data = valid_data(tmp_path)
    data["local"]["retention_days"] = -1

    with pytest.raises(ConfigError, match="retention_days"):
        parse_config(data)


def test_expands_home_and_env(tmp_path, monkeypatch):
    monkeypatch.setenv("ARCHIVER_TEST_DIR", str(tmp_path))
    data = valid_data(tmp_path)
    data["local"]["log_directory"] = "$ARCHIVER_TEST_DIR/logs"

    config = parse_config(data)

    assert config.local.log_directory == os.path.join(str(tmp_path), "logs")


def test_secret_not_in_repr(tmp_path):
    config = parse_config(valid_data(tmp_path))

    assert "secret" not in repr(config.remote)


def test_comment_keys_ignored(tmp_path):
    data = valid_data(tmp_path)
    data["_comment"] = "notes"

    parse_config(data)


def test_default_config_template(tmp_path):
    path = tmp_path / "etc" / "config.json"

    create_default_config(str(path))

    assert stat.S_IMODE(path.stat().st_mode) == 0o600
    data = json.loads(path.read_text())
    assert data["local"]["retention_days"] == 7
    # Credentials are left blank, so the template is rejected until edited
    with pytest.raises(ConfigError):
        load_config(str(path))
