import pytest

from identity_register.config import settings
from identity_register.config.settings import RegisterConfig, load_settings

ENV_VARS = [
    "KEYSTONE_COMMAND", "KEYSTONE_INSECURE", "IDENTITY_CATALOG_BACKEND",
    "OS_SERVICE_ENDPOINT", "OS_SERVICE_TOKEN", "OS_AUTH_URL", "REGISTER_LOG_LEVEL",
]


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    for var in ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    real_path = settings.Path

    def fake_path(target):
        if str(target) == "/run/secrets":
            return tmp_path
        return real_path(target)

    monkeypatch.setattr(settings, "Path", fake_path)
    return tmp_path


def test_defaults(clean_env):
    cfg = load_settings()
    assert cfg == RegisterConfig()
    assert cfg.service_endpoint is None
    assert cfg.service_token is None
    assert cfg.dynamic_catalog is True


def test_reads_environment(clean_env, monkeypatch):
    monkeypatch.setenv("KEYSTONE_COMMAND", "/opt/keystone/bin/keystone")
    monkeypatch.setenv("KEYSTONE_INSECURE", "true")
    monkeypatch.setenv("IDENTITY_CATALOG_BACKEND", "Templated")
    monkeypatch.setenv("OS_SERVICE_ENDPOINT", "http://keystone:35357/v2.0")
    monkeypatch.setenv("OS_SERVICE_TOKEN", "env-token")
    monkeypatch.setenv("OS_AUTH_URL", "http://keystone:5000/v2.0")
    monkeypatch.setenv("REGISTER_LOG_LEVEL", "debug")

    cfg = load_settings()

    assert cfg.keystone_command == "/opt/keystone/bin/keystone"
    assert cfg.insecure is True
    assert cfg.catalog_backend == "templated"
    assert cfg.dynamic_catalog is False
    assert cfg.service_endpoint == "http://keystone:35357/v2.0"
    assert cfg.service_token == "env-token"
    assert cfg.auth_url == "http://keystone:5000/v2.0"
    assert cfg.log_level == "DEBUG"


def test_service_token_prefers_run_secrets(clean_env, monkeypatch):
    (clean_env / "os_service_token").write_text("file-token\n")
    monkeypatch.setenv("OS_SERVICE_TOKEN", "env-token")
    assert load_settings().service_token == "file-token"


def test_empty_secret_file_falls_back_to_env(clean_env, monkeypatch):
    (clean_env / "os_service_token").write_text("  ")
    monkeypatch.setenv("OS_SERVICE_TOKEN", "env-token")
    assert load_settings().service_token == "env-token"


def test_unknown_backend_rejected():
    with pytest.raises(ValueError, match="Unknown catalog backend 'ldap'"):
        RegisterConfig(catalog_backend="ldap")
