"""Tests for configuration helpers."""

from __future__ import annotations

import pytest

from sota_client import config as config_module
from sota_client.client import DEFAULT_AUTH_URL
from sota_client.config import ClientConfig
from sota_client.errors import InvalidConfiguration


class FakeKeyring:
    def __init__(self) -> None:
        self.store: dict[tuple[str, str], str] = {}

    def set_password(self, service: str, username: str, password: str) -> None:
        self.store[(service, username)] = password

    def get_password(self, service: str, username: str) -> str | None:
        return self.store.get((service, username))

    def delete_password(self, service: str, username: str) -> None:
        self.store.pop((service, username), None)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch) -> None:
    for key in ("SOTA_CLIENT_CLIENT__CLIENT_ID", "SOTA_CLIENT_ACCOUNT__USERNAME",
                "SOTA_CLIENT_ACCOUNT__PASSWORD", "SOTA_CLIENT_ENDPOINTS__TIMEOUT_S"):
        monkeypatch.delenv(key, raising=False)


def test_save_and_load_roundtrip(tmp_path) -> None:
    cfg = ClientConfig(
        client_id="wavelog",
        username="w0keh",
        password="mYp@55w0rd!",
        api_url="https://api.example",
        timeout_s=3.5,
    )

    path = tmp_path / "config.toml"
    config_module.save_config(cfg, path=path)

    loaded = config_module.load_config(path)

    assert loaded == cfg
    assert oct(path.stat().st_mode & 0o777) == oct(0o600)


def test_defaults_applied_for_missing_endpoints(tmp_path) -> None:
    path = tmp_path / "config.toml"
    path.write_text(
        'version = 1\n[client]\nclient_id = "wavelog"\n'
        '[account]\nusername = "w0keh"\npassword = "secret"\n',
        encoding="utf-8",
    )

    loaded = config_module.load_config(path)

    assert loaded.auth_url == DEFAULT_AUTH_URL
    assert loaded.timeout_s == config_module.DEFAULT_TIMEOUT_S


def test_missing_client_id_is_invalid_configuration(tmp_path) -> None:
    path = tmp_path / "config.toml"
    path.write_text('[account]\nusername = "w0keh"\npassword = "secret"\n', encoding="utf-8")

    with pytest.raises(InvalidConfiguration, match="client_id"):
        config_module.load_config(path)


def test_unsupported_version(tmp_path) -> None:
    path = tmp_path / "config.toml"
    path.write_text("version = 99\n", encoding="utf-8")

    with pytest.raises(InvalidConfiguration, match="version"):
        config_module.load_config(path)


def test_env_overrides_config_file(tmp_path, monkeypatch) -> None:
    path = tmp_path / "config.toml"
    config_module.save_config(
        ClientConfig(client_id="wavelog", username="w0keh", password="secret"), path=path
    )
    monkeypatch.setenv("SOTA_CLIENT_ACCOUNT__PASSWORD", "12345")
    monkeypatch.setenv("SOTA_CLIENT_ENDPOINTS__TIMEOUT_S", "2")

    loaded = config_module.load_config(path)

    assert loaded.password == "12345"
    assert loaded.timeout_s == 2.0


def test_explicit_overrides_beat_env(tmp_path, monkeypatch) -> None:
    path = tmp_path / "config.toml"
    config_module.save_config(
        ClientConfig(client_id="wavelog", username="w0keh", password="secret"), path=path
    )
    monkeypatch.setenv("SOTA_CLIENT_ACCOUNT__USERNAME", "from-env")

    loaded = config_module.load_config(path, overrides={"account": {"username": "from-cli"}})

    assert loaded.username == "from-cli"


def test_resolve_config_path_env_override(monkeypatch, tmp_path) -> None:
    path = tmp_path / "custom.toml"
    monkeypatch.setenv(config_module.CONFIG_ENV_VAR, str(path))

    resolved = config_module.resolve_config_path()

    assert resolved == path


def test_resolve_config_path_uses_xdg(monkeypatch, tmp_path) -> None:
    monkeypatch.delenv(config_module.CONFIG_ENV_VAR, raising=False)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))

    resolved = config_module.resolve_config_path()

    assert resolved == tmp_path / "sota-client" / "config.toml"


def test_password_stored_in_keyring(tmp_path, monkeypatch) -> None:
    fake = FakeKeyring()
    monkeypatch.setattr(config_module, "_keyring", fake)
    cfg = ClientConfig(
        client_id="wavelog", username="w0keh", password="secret", password_in_keyring=True
    )
    path = tmp_path / "config.toml"

    config_module.save_config(cfg, path=path)

    assert "secret" not in path.read_text(encoding="utf-8")
    assert config_module.KEYRING_SENTINEL in path.read_text(encoding="utf-8")
    assert fake.store[(config_module.KEYRING_SERVICE, "w0keh")] == "secret"
    assert config_module.load_config(path) == cfg


def test_keyring_sentinel_without_stored_password(tmp_path, monkeypatch) -> None:
    monkeypatch.setattr(config_module, "_keyring", FakeKeyring())
    path = tmp_path / "config.toml"
    path.write_text(
        '[client]\nclient_id = "wavelog"\n'
        f'[account]\nusername = "w0keh"\npassword = "{config_module.KEYRING_SENTINEL}"\n',
        encoding="utf-8",
    )

    with pytest.raises(InvalidConfiguration, match="keyring"):
        config_module.load_config(path)


def test_keyring_unavailable(tmp_path, monkeypatch) -> None:
    monkeypatch.setattr(config_module, "_keyring", None)
    cfg = ClientConfig(
        client_id="wavelog", username="w0keh", password="secret", password_in_keyring=True
    )

    assert config_module.keyring_supported() is False
    with pytest.raises(InvalidConfiguration):
        config_module.save_config(cfg, path=tmp_path / "config.toml")
    assert not (tmp_path / "config.toml").exists()
    config_module.delete_password_from_keyring("w0keh")


def test_config_summary_hides_password() -> None:
    cfg = ClientConfig(client_id="wavelog", username="w0keh", password="secret")

    summary = config_module.config_summary(cfg)

    assert "wavelog" in summary
    assert "w0keh" in summary
    assert "secret" not in summary
