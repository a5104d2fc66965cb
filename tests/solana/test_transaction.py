import base64

import pytest
from cryptography.hazmat.primitives.asymmetric import ed25519

from solcollect.solana.instructions import encode_intent
from solcollect.solana.intents import build_create_intent, build_verify_intent
from solcollect.solana.keys import Keypair
from solcollect.solana.metadata import TOKEN_METADATA_PROGRAM_ID
from solcollect.solana.transaction import (
    AccountMeta,
    Instruction,
    TransactionError,
    compile_message,
    encode_compact_u16,
    sign_transaction,
)

BLOCKHASH = str(Keypair.generate().identity)


def test_compact_u16_encoding() -> None:
    assert encode_compact_u16(0) == b"\x00"
    assert encode_compact_u16(127) == b"\x7f"
    assert encode_compact_u16(128) == b"\x80\x01"
    assert encode_compact_u16(16_384) == b"\x80\x80\x01"


def test_compile_message_orders_payer_first_and_counts_readonly() -> None:
    payer = Keypair.generate().identity
    writable = Keypair.generate().identity
    program = Keypair.generate().identity
    instruction = Instruction(program, (AccountMeta(writable, False, True),), b"\x01")

    message, signers = compile_message(payer, [instruction], BLOCKHASH)

    assert signers == [payer]
    assert message[:3] == bytes([1, 0, 1])
    assert message[3] == 3
    assert message[4:36] == payer.raw
    assert message[36:68] == writable.raw
    assert message[68:100] == program.raw


def test_compile_message_requires_instructions() -> None:
    with pytest.raises(TransactionError):
        compile_message(Keypair.generate().identity, [], BLOCKHASH)


def test_sign_transaction_produces_verifiable_signatures() -> None:
    authority = Keypair.generate()
    mint = Keypair.generate()
    intent = build_create_intent(
        mint=mint.identity,
        authority=authority.identity,
        name="My NFT Collection",
        symbol="MNC",
        uri="https://example.com/c.json",
        is_collection=True,
    )

    wire, payer_signature = sign_transaction(authority.identity, encode_intent(intent), BLOCKHASH, [authority, mint])

    raw = base64.b64decode(wire)
    assert raw[0] == 2
    assert raw[1:65] == payer_signature
    message = raw[1 + 64 * 2 :]
    ed25519.Ed25519PublicKey.from_public_bytes(authority.identity.raw).verify(payer_signature, message)
    ed25519.Ed25519PublicKey.from_public_bytes(mint.identity.raw).verify(raw[65:129], message)


def test_sign_transaction_reports_missing_signers() -> None:
    authority = Keypair.generate()
    intent = build_create_intent(
        mint=Keypair.generate().identity,
        authority=authority.identity,
        name="n",
        symbol="S",
        uri="u",
    )
    with pytest.raises(TransactionError, match="Missing signatures"):
        sign_transaction(authority.identity, encode_intent(intent), BLOCKHASH, [authority])


def test_verify_instruction_targets_token_metadata() -> None:
    intent = build_verify_intent(
        member_mint=Keypair.generate().identity,
        collection_mint=Keypair.generate().identity,
        authority=Keypair.generate().identity,
    )

    (instruction,) = encode_intent(intent)

    assert instruction.program_id == TOKEN_METADATA_PROGRAM_ID
    assert instruction.data == bytes([52, 1])
    assert instruction.accounts[0].pubkey == intent.authority and instruction.accounts[0].is_signer
    assert instruction.accounts[2].pubkey == intent.metadata_address and instruction.accounts[2].is_writable
