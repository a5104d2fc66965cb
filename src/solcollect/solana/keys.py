"""Identities, keypair files, and program-derived addresses."""

from __future__ import annotations

import hashlib
import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

from cryptography.hazmat.primitives.asymmetric import ed25519
from cryptography.hazmat.primitives.serialization import (
    Encoding,
    NoEncryption,
    PrivateFormat,
    PublicFormat,
)

BASE58_ALPHABET = "123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"
DEFAULT_KEYPAIR_PATH = Path.home() / ".config" / "solana" / "id.json"
PDA_MARKER = b"ProgramDerivedAddress"
MAX_SEED_LENGTH = 32

# Edwards25519 field prime and curve constant d = -121665/121666.
_FIELD_P = 2**255 - 19
_CURVE_D = (-121665 * pow(121666, _FIELD_P - 2, _FIELD_P)) % _FIELD_P


class KeypairError(RuntimeError):
    """Raised when keypair material cannot be loaded or parsed."""


def b58encode(data: bytes) -> str:
    num = int.from_bytes(data, "big")
    encoded = ""
    while num > 0:
        num, remainder = divmod(num, 58)
        encoded = BASE58_ALPHABET[remainder] + encoded
    zeros = len(data) - len(data.lstrip(b"\x00"))
    return ("1" * zeros) + encoded


def b58decode(value: str) -> bytes:
    num = 0
    for char in value:
        try:
            num = num * 58 + BASE58_ALPHABET.index(char)
        except ValueError as exc:
            raise KeypairError(f"Invalid base58 character {char!r}.") from exc
    full_bytes = num.to_bytes((num.bit_length() + 7) // 8, "big") if num else b""
    zeros = len(value) - len(value.lstrip("1"))
    return b"\x00" * zeros + full_bytes


@dataclass(frozen=True, slots=True)
class Identity:
    """A 32-byte public key identifying a ledger account."""

    raw: bytes

    def __post_init__(self) -> None:
        if len(self.raw) != 32:
            raise KeypairError(f"Public keys are 32 bytes, got {len(self.raw)}.")

    @classmethod
    def from_string(cls, value: str) -> "Identity":
        return cls(b58decode(value.strip()))

    def __bytes__(self) -> bytes:
        return self.raw

    def __str__(self) -> str:
        return b58encode(self.raw)

    def __repr__(self) -> str:
        return f"Identity({self})"


class Keypair:
    """An ed25519 signing key and its public identity."""

    def __init__(self, private_key: ed25519.Ed25519PrivateKey) -> None:
        self._private_key = private_key
        self.identity = Identity(private_key.public_key().public_bytes(Encoding.Raw, PublicFormat.Raw))

    @classmethod
    def generate(cls) -> "Keypair":
        return cls(ed25519.Ed25519PrivateKey.generate())

    @classmethod
    def from_secret(cls, secret: bytes) -> "Keypair":
        if len(secret) not in {32, 64}:
            raise KeypairError("Secret key must be 32 or 64 bytes.")
        private_key = ed25519.Ed25519PrivateKey.from_private_bytes(secret[:32])
        keypair = cls(private_key)
        if len(secret) == 64 and secret[32:] != keypair.identity.raw:
            raise KeypairError("Provided public key does not match private key.")
        return keypair

    def secret_bytes(self) -> bytes:
        private_bytes = self._private_key.private_bytes(Encoding.Raw, PrivateFormat.Raw, NoEncryption())
        return private_bytes + self.identity.raw

    def sign(self, message: bytes) -> bytes:
        return self._private_key.sign(message)

    def __repr__(self) -> str:
        return f"Keypair({self.identity})"


def load_keypair(path: Path | None = None) -> Keypair:
    """Load a solana-keygen style JSON byte array."""
    key_path = (path or DEFAULT_KEYPAIR_PATH).expanduser()
    try:
        raw = json.loads(key_path.read_text())
    except FileNotFoundError as exc:
        raise KeypairError(f"Keypair file not found at {key_path}. Generate one with `solana-keygen new`.") from exc
    except (OSError, json.JSONDecodeError) as exc:
        raise KeypairError(f"Failed to read keypair {key_path}: {exc}") from exc
    if not isinstance(raw, list) or not all(isinstance(item, int) for item in raw):
        raise KeypairError(f"Keypair file {key_path} must contain a JSON array of bytes.")
    return Keypair.from_secret(bytes(item & 0xFF for item in raw))


def save_keypair(keypair: Keypair, path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(list(keypair.secret_bytes())))
    try:
        os.chmod(path, 0o600)
    except PermissionError:
        pass
    return path


def is_on_curve(data: bytes) -> bool:
    """Return True when `data` decompresses to an ed25519 point."""
    y = int.from_bytes(data, "little") & ((1 << 255) - 1)
    y %= _FIELD_P
    y2 = y * y % _FIELD_P
    u = (y2 - 1) % _FIELD_P
    v = (_CURVE_D * y2 + 1) % _FIELD_P
    x2 = u * pow(v, _FIELD_P - 2, _FIELD_P) % _FIELD_P
    if x2 == 0:
        return True
    return pow(x2, (_FIELD_P - 1) // 2, _FIELD_P) == 1


def create_program_address(seeds: Sequence[bytes], program_id: Identity) -> Identity:
    hasher = hashlib.sha256()
    for seed in seeds:
        if len(seed) > MAX_SEED_LENGTH:
            raise KeypairError("Seed exceeds 32 bytes.")
        hasher.update(seed)
    hasher.update(program_id.raw)
    hasher.update(PDA_MARKER)
    digest = hasher.digest()
    if is_on_curve(digest):
        raise KeypairError("Derived address lies on the ed25519 curve.")
    return Identity(digest)


def find_program_address(seeds: Sequence[bytes], program_id: Identity) -> tuple[Identity, int]:
    """Return the first off-curve address (and its bump) for `seeds`."""
    if any(len(seed) > MAX_SEED_LENGTH for seed in seeds):
        raise KeypairError("Seed exceeds 32 bytes.")
    for bump in range(255, -1, -1):
        try:
            return create_program_address([*seeds, bytes([bump])], program_id), bump
        except KeypairError:
            continue
    raise KeypairError("Unable to find a viable program address bump seed.")


__all__ = [
    "BASE58_ALPHABET",
    "DEFAULT_KEYPAIR_PATH",
    "Identity",
    "Keypair",
    "KeypairError",
    "b58decode",
    "b58encode",
    "create_program_address",
    "find_program_address",
    "is_on_curve",
    "load_keypair",
    "save_keypair",
]
