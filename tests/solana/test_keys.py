import json
from pathlib import Path

import pytest

from solcollect.solana.keys import (
    Identity,
    Keypair,
    KeypairError,
    b58decode,
    b58encode,
    create_program_address,
    find_program_address,
    is_on_curve,
    load_keypair,
    save_keypair,
)
from solcollect.solana.metadata import TOKEN_METADATA_PROGRAM_ID


def test_base58_preserves_leading_zero_bytes() -> None:
    assert b58encode(bytes(32)) == "1" * 32
    assert b58decode("1" * 32) == bytes(32)
    assert b58decode(b58encode(b"\x00\x00hello")) == b"\x00\x00hello"


def test_base58_rejects_invalid_characters() -> None:
    with pytest.raises(KeypairError):
        b58decode("0OIl")


def test_identity_requires_32_bytes() -> None:
    with pytest.raises(KeypairError):
        Identity(b"short")
    identity = Identity.from_string("metaqbxxUerdq28cj1RbAWkYQm3ybzjb6a8bt518x1s")
    assert str(identity) == "metaqbxxUerdq28cj1RbAWkYQm3ybzjb6a8bt518x1s"


def test_keypair_file_round_trip(tmp_path: Path) -> None:
    keypair = Keypair.generate()
    path = save_keypair(keypair, tmp_path / "id.json")

    loaded = load_keypair(path)

    assert loaded.identity == keypair.identity
    assert len(json.loads(path.read_text())) == 64


def test_load_keypair_missing_file(tmp_path: Path) -> None:
    with pytest.raises(KeypairError, match="not found"):
        load_keypair(tmp_path / "missing.json")


def test_load_keypair_rejects_mismatched_public_half(tmp_path: Path) -> None:
    secret = Keypair.generate().secret_bytes()[:32] + Keypair.generate().identity.raw
    path = tmp_path / "bad.json"
    path.write_text(json.dumps(list(secret)))

    with pytest.raises(KeypairError, match="does not match"):
        load_keypair(path)


def test_public_keys_lie_on_curve() -> None:
    assert is_on_curve(Keypair.generate().identity.raw)


def test_find_program_address_is_deterministic_and_off_curve() -> None:
    seeds = [b"metadata", TOKEN_METADATA_PROGRAM_ID.raw, Keypair.generate().identity.raw]

    address, bump = find_program_address(seeds, TOKEN_METADATA_PROGRAM_ID)

    assert find_program_address(seeds, TOKEN_METADATA_PROGRAM_ID) == (address, bump)
    assert not is_on_curve(address.raw)
    assert create_program_address([*seeds, bytes([bump])], TOKEN_METADATA_PROGRAM_ID) == address


def test_find_program_address_rejects_long_seeds() -> None:
    with pytest.raises(KeypairError):
        find_program_address([b"x" * 33], TOKEN_METADATA_PROGRAM_ID)
