"""Tests for environment-driven configuration."""
from hostmount.config import load_config, load_secret


def test_defaults(monkeypatch):
    for name in ("REMOTES_FILE", "REMOTES_MOUNT_BASE", "REMOTES_COMMAND_TIMEOUT", "REMOTES_DRY_RUN",
                 "REMOTES_SECRET", "REMOTES_SECRET_FILE", "JWT_SECRET", "JWT_SECRET_FILE"):
        monkeypatch.delenv(name, raising=False)

    config = load_config()

    assert config["REMOTES_FILE"] == "/boot/config/remotes.json"
    assert config["REMOTES_MOUNT_BASE"] == "/mnt/remotes"
    assert config["REMOTES_COMMAND_TIMEOUT"] == 60.0
    assert config["REMOTES_DRY_RUN"] is False
    assert config["REMOTES_SECRET"] is None


def test_overrides(monkeypatch):
    monkeypatch.setenv("REMOTES_MOUNT_BASE", "/srv/remotes")
    monkeypatch.setenv("REMOTES_COMMAND_TIMEOUT", "15")
    monkeypatch.setenv("REMOTES_DRY_RUN", "yes")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    config = load_config()

    assert config["REMOTES_MOUNT_BASE"] == "/srv/remotes"
    assert config["REMOTES_COMMAND_TIMEOUT"] == 15.0
    assert config["REMOTES_DRY_RUN"] is True
    assert config["LOG_LEVEL"] == "DEBUG"


def test_bad_numbers_fall_back(monkeypatch):
    monkeypatch.setenv("REMOTES_COMMAND_TIMEOUT", "soon")
    monkeypatch.setenv("REMOTES_DRY_RUN", "maybe")
    config = load_config()
    assert config["REMOTES_COMMAND_TIMEOUT"] == 60.0
    assert config["REMOTES_DRY_RUN"] is False


def test_secret_falls_back_to_jwt_secret(monkeypatch):
    monkeypatch.delenv("REMOTES_SECRET", raising=False)
    monkeypatch.delenv("REMOTES_SECRET_FILE", raising=False)
    monkeypatch.delenv("JWT_SECRET_FILE", raising=False)
    monkeypatch.setenv("JWT_SECRET", "jwt-secret")
    assert load_config()["REMOTES_SECRET"] == "jwt-secret"

    monkeypatch.setenv("REMOTES_SECRET", "remotes-secret")
    assert load_config()["REMOTES_SECRET"] == "remotes-secret"


def test_load_secret_from_file(monkeypatch, tmp_path):
    secret_file = tmp_path / "secret"
    secret_file.write_text("from-file\n")
    monkeypatch.setenv("REMOTES_SECRET_FILE", str(secret_file))
    monkeypatch.setenv("REMOTES_SECRET", "from-env")

    assert load_secret("REMOTES_SECRET") == "from-file"


def test_load_secret_default(monkeypatch):
    monkeypatch.delenv("UNSET_SECRET", raising=False)
    monkeypatch.delenv("UNSET_SECRET_FILE", raising=False)
    assert load_secret("UNSET_SECRET", "fallback") == "fallback"
