"""Keyring state in ~/.config/peerbox/ (YAML, keys as base58 strings)."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from peerbox.crypto import PrivateKey, PublicKey, parse_private_key, parse_public_key
from peerbox.errors import ConfigError, CryptError

log = logging.getLogger(__name__)


class KeyDumper(yaml.SafeDumper):
    """SafeDumper that writes key values as their base58 text."""


def _represent_key(dumper: yaml.SafeDumper, key: PrivateKey | PublicKey) -> yaml.ScalarNode:
    return dumper.represent_str(key.to_text())


KeyDumper.add_representer(PrivateKey, _represent_key)
KeyDumper.add_representer(PublicKey, _represent_key)


def dump_yaml(data: object) -> str:
    return yaml.dump(data, Dumper=KeyDumper, default_flow_style=False, sort_keys=False)


def load_yaml(text: str) -> object:
    try:
        return yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"malformed keyring: {exc}") from exc


def _parse_field(name: str, value: object, parse):
    if not isinstance(value, str):
        raise ConfigError(f"{name}: expected a base58 string, got {type(value).__name__}")
    try:
        return parse(value)
    except CryptError as exc:
        raise ConfigError(f"{name}: {exc}") from exc


@dataclass
class Keyring:
    """Our identity key plus named peer public keys."""

    private_key: PrivateKey | None = None
    peers: dict[str, PublicKey] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {"private_key": self.private_key, "peers": dict(self.peers)}

    @classmethod
    def from_dict(cls, d: dict) -> Keyring:
        priv = d.get("private_key")
        if priv is not None:
            priv = _parse_field("private_key", priv, parse_private_key)

        raw_peers = d.get("peers") or {}
        if not isinstance(raw_peers, dict):
            raise ConfigError("peers: expected a mapping of name to public key")
        peers = {
            str(name): _parse_field(f"peers.{name}", pub, parse_public_key)
            for name, pub in raw_peers.items()
        }
        return cls(private_key=priv, peers=peers)

    def peer_name(self, pub: PublicKey) -> str | None:
        for name, known in self.peers.items():
            if known == pub:
                return name
        return None


def get_config_dir() -> Path:
    env = os.environ.get("PEERBOX_HOME")
    d = Path(env) if env else Path.home() / ".config" / "peerbox"
    d.mkdir(parents=True, exist_ok=True)
    return d


def keyring_path() -> Path:
    return get_config_dir() / "keyring.yaml"


def load_keyring() -> Keyring:
    p = keyring_path()
    if not p.exists():
        return Keyring()
    try:
        text = p.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigError(f"{p}: cannot read keyring: {exc}") from exc
    data = load_yaml(text)
    if data is None:
        return Keyring()
    if not isinstance(data, dict):
        raise ConfigError(f"{p}: expected a mapping at top level")
    return Keyring.from_dict(data)


def save_keyring(keyring: Keyring) -> None:
    p = keyring_path()
    # mode is narrowed before any secret bytes hit the file
    fd = os.open(p, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
    os.fchmod(fd, 0o600)
    with os.fdopen(fd, "w", encoding="utf-8") as f:
        f.write(dump_yaml(keyring.to_dict()))
    log.debug("saved keyring to %s (%d peers)", p, len(keyring.peers))
