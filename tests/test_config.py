"""Tests for peerbox.config — keyring YAML and config dir resolution."""

import os
import stat

import pytest
import yaml

from peerbox import config
from peerbox.crypto import generate
from peerbox.errors import ConfigError


@pytest.fixture(autouse=True)
def _isolate_home(tmp_path, monkeypatch):
    """Redirect config dir to tmp_path so tests never touch real HOME."""
    monkeypatch.setattr(config, "get_config_dir", lambda: tmp_path)
    monkeypatch.setattr(config, "keyring_path", lambda: tmp_path / "keyring.yaml")


def test_load_keyring_missing_file():
    keyring = config.load_keyring()
    assert keyring.private_key is None
    assert keyring.peers == {}


def test_load_keyring_empty_file(tmp_path):
    (tmp_path / "keyring.yaml").write_text("")
    assert config.load_keyring() == config.Keyring()


def test_save_load_keyring_roundtrip():
    key = generate()
    bob = generate().public_key()
    config.save_keyring(config.Keyring(private_key=key, peers={"bob": bob}))

    restored = config.load_keyring()
    assert restored.private_key == key
    assert restored.peers == {"bob": bob}
    assert restored.peer_name(bob) == "bob"
    assert restored.peer_name(key.public_key()) is None


def test_keyring_yaml_uses_base58_strings(tmp_path):
    key = generate()
    bob = generate().public_key()
    config.save_keyring(config.Keyring(private_key=key, peers={"bob": bob}))

    text = (tmp_path / "keyring.yaml").read_text()
    assert "!!python" not in text
    data = yaml.safe_load(text)
    assert data == {"private_key": key.text(), "peers": {"bob": bob.text()}}


def test_keyring_permissions(tmp_path):
    config.save_keyring(config.Keyring(private_key=generate()))
    mode = (tmp_path / "keyring.yaml").stat().st_mode & 0o777
    assert mode == 0o600


def test_dump_yaml_marshals_keys():
    pub = generate().public_key()
    assert config.dump_yaml({"pub": pub}) == f"pub: {pub.text()}\n"


def test_from_dict_invalid_private_key():
    with pytest.raises(ConfigError, match="private_key"):
        config.Keyring.from_dict({"private_key": "not-valid-base58!!"})


def test_from_dict_invalid_peer_key():
    with pytest.raises(ConfigError, match="peers.bob"):
        config.Keyring.from_dict({"peers": {"bob": "3mJr7AoUXx2Wqd"}})


def test_from_dict_non_string_key():
    with pytest.raises(ConfigError):
        config.Keyring.from_dict({"private_key": 12345})


def test_load_keyring_malformed_yaml(tmp_path):
    (tmp_path / "keyring.yaml").write_text("peers: [unclosed\n")
    with pytest.raises(ConfigError):
        config.load_keyring()


def test_load_keyring_not_a_mapping(tmp_path):
    (tmp_path / "keyring.yaml").write_text("- just\n- a list\n")
    with pytest.raises(ConfigError):
        config.load_keyring()


def test_get_config_dir_env_override(monkeypatch, tmp_path):
    monkeypatch.undo()
    target = tmp_path / "custom"
    monkeypatch.setenv("PEERBOX_HOME", str(target))
    assert config.get_config_dir() == target
    assert target.is_dir()
    assert config.keyring_path() == target / "keyring.yaml"


def test_load_keyring_invalid_utf8(tmp_path):
    (tmp_path / "keyring.yaml").write_bytes(b"private_key: \xff\xfe\n")
    with pytest.raises(ConfigError, match="cannot read keyring"):
        config.load_keyring()


def test_load_keyring_unreadable(tmp_path):
    (tmp_path / "keyring.yaml").mkdir()
    with pytest.raises(ConfigError, match="cannot read keyring"):
        config.load_keyring()


def test_keyring_never_written_with_open_mode(monkeypatch):
    modes = []
    real_fdopen = os.fdopen

    def spy(fd, *args, **kwargs):
        modes.append(stat.S_IMODE(os.fstat(fd).st_mode))
        return real_fdopen(fd, *args, **kwargs)

    monkeypatch.setattr(config.os, "fdopen", spy)
    old_umask = os.umask(0o022)
    try:
        config.save_keyring(config.Keyring(private_key=generate()))
    finally:
        os.umask(old_umask)
    assert modes == [0o600]


def test_save_keyring_narrows_existing_file(tmp_path):
    p = tmp_path / "keyring.yaml"
    p.write_text("")
    p.chmod(0o644)
    config.save_keyring(config.Keyring(private_key=generate()))
    assert stat.S_IMODE(p.stat().st_mode) == 0o600
