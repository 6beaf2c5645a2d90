from __future__ import annotations

import pytest

from visit_counter import config
from visit_counter.errors import ConfigurationError

_ENV_VARS = [
    "LIBSQL_CLIENT_URL",
    "LIBSQL_CLIENT_TOKEN",
    "WORKER_VERSION",
    "LEGACY_ERROR_STATUS",
    "DB_TIMEOUT_SECONDS",
]


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    # Keep a developer's .env out of the picture.
    monkeypatch.chdir(tmp_path)
    return monkeypatch


def test_get_settings_defaults(clean_env) -> None:
    settings = config.get_settings()

    assert settings.libsql_client_url is None
    assert settings.libsql_client_token is None
    assert settings.db_timeout_seconds == 10.0
    assert settings.legacy_error_status is False
    assert settings.log_level == "INFO"
    assert settings.port == 8787


def test_secrets_are_read_from_environment(clean_env) -> None:
    clean_env.setenv("LIBSQL_CLIENT_URL", "libsql://visits.turso.io")
    clean_env.setenv("LIBSQL_CLIENT_TOKEN", "s3cret")
    clean_env.setenv("LEGACY_ERROR_STATUS", "true")

    settings = config.get_settings()

    assert settings.database_credentials() == ("libsql://visits.turso.io", "s3cret")
    assert settings.legacy_error_status is True
    assert "s3cret" not in repr(settings)


def test_settings_are_resolved_per_call(clean_env) -> None:
    clean_env.setenv("WORKER_VERSION", "1")
    first = config.get_settings()
    clean_env.setenv("WORKER_VERSION", "2")
    second = config.get_settings()

    assert (first.worker_version, second.worker_version) == ("1", "2")


def test_env_file_is_honoured(clean_env, tmp_path) -> None:
    (tmp_path / ".env").write_text("LIBSQL_CLIENT_URL=file:visits.db\n", encoding="utf-8")

    assert config.get_settings().libsql_client_url == "file:visits.db"


@pytest.mark.parametrize(
    "url, token, missing",
    [
        (None, "t", "LIBSQL_CLIENT_URL"),
        ("", "t", "LIBSQL_CLIENT_URL"),
        ("libsql://visits.turso.io", None, "LIBSQL_CLIENT_TOKEN"),
        ("libsql://visits.turso.io", "", "LIBSQL_CLIENT_TOKEN"),
    ],
)
def test_missing_secret_is_a_configuration_error(clean_env, url, token, missing) -> None:
    settings = config.Settings(_env_file=None, LIBSQL_CLIENT_URL=url, LIBSQL_CLIENT_TOKEN=token)

    with pytest.raises(ConfigurationError, match=missing) as excinfo:
        settings.database_credentials()

    assert excinfo.value.status_code == 500


def test_timeout_must_be_positive(clean_env) -> None:
    clean_env.setenv("DB_TIMEOUT_SECONDS", "0")

    with pytest.raises(ValueError):
        config.get_settings()
