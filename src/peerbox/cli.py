"""peerbox CLI — typer entry point."""

from __future__ import annotations

import json
import logging

import typer

from peerbox import config, crypto, schema
from peerbox.errors import CryptError

app = typer.Typer(name="peerbox", no_args_is_help=True)

PRETTY = typer.Option(False, "--pretty", help="Human-readable output")


def _out(data: object, pretty: bool) -> None:
    if pretty:
        typer.echo(json.dumps(data, indent=2))
    else:
        typer.echo(json.dumps(data))


def _fail(message: str) -> typer.Exit:
    typer.echo(json.dumps({"error": message}), err=True)
    return typer.Exit(1)


def _identity(keyring: config.Keyring) -> crypto.PrivateKey:
    if keyring.private_key is None:
        raise _fail("no identity key; run `peerbox generate` first")
    return keyring.private_key


def _resolve_peer(keyring: config.Keyring, peer: str) -> crypto.PublicKey:
    if peer in keyring.peers:
        return keyring.peers[peer]
    try:
        return crypto.parse_public_key(peer)
    except CryptError as exc:
        raise _fail(f"unknown peer: {peer} ({exc})")


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging")) -> None:
    """Key pairs and NaCl box encryption between peers."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")


@app.command()
def generate(
    force: bool = typer.Option(False, "--force", help="Replace an existing identity key"),
    pretty: bool = PRETTY,
) -> None:
    """Generate an identity key pair and store it in the keyring."""
    try:
        keyring = config.load_keyring()
        if keyring.private_key is not None and not force:
            raise _fail("identity key already exists; pass --force to replace it")
        keyring.private_key = crypto.generate()
        config.save_keyring(keyring)
    except CryptError as exc:
        raise _fail(str(exc))

    _out({"public_key": keyring.private_key.public_key().text()}, pretty)


@app.command()
def pubkey(pretty: bool = PRETTY) -> None:
    """Print our public key."""
    try:
        keyring = config.load_keyring()
    except CryptError as exc:
        raise _fail(str(exc))
    _out({"public_key": _identity(keyring).public_key().text()}, pretty)


@app.command()
def trust(name: str, public_key: str, pretty: bool = PRETTY) -> None:
    """Remember a peer's public key under a name."""
    try:
        keyring = config.load_keyring()
        keyring.peers[name] = crypto.parse_public_key(public_key)
        config.save_keyring(keyring)
    except CryptError as exc:
        raise _fail(str(exc))

    _out({"name": name, "public_key": keyring.peers[name].text()}, pretty)


@app.command()
def peers(pretty: bool = PRETTY) -> None:
    """List known peers."""
    try:
        keyring = config.load_keyring()
    except CryptError as exc:
        raise _fail(str(exc))
    _out({name: pub.text() for name, pub in keyring.peers.items()}, pretty)


@app.command()
def encrypt(peer: str, message: str, pretty: bool = PRETTY) -> None:
    """Encrypt a message for a peer (name or base58 public key)."""
    try:
        keyring = config.load_keyring()
        priv = _identity(keyring)
        their_pub = _resolve_peer(keyring, peer)
        ct = priv.encrypt(their_pub, message.encode())
    except CryptError as exc:
        raise _fail(str(exc))

    _out({"to": their_pub.text(), "payload": schema.encode_payload(ct)}, pretty)


@app.command()
def decrypt(payload: str, pretty: bool = PRETTY) -> None:
    """Decrypt a base64 payload sealed for us."""
    try:
        keyring = config.load_keyring()
        priv = _identity(keyring)
        sender, pt = priv.decrypt(schema.decode_payload(payload))
    except CryptError as exc:
        raise _fail(str(exc))

    _out({
        "from": sender.text(),
        "peer": keyring.peer_name(sender),
        "plaintext": pt.decode(errors="replace"),
    }, pretty)
