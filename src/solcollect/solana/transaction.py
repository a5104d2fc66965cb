"""Legacy Solana transaction assembly and signing."""

from __future__ import annotations

import base64
from dataclasses import dataclass
from typing import Sequence

from .keys import Identity, Keypair, b58decode


class TransactionError(RuntimeError):
    """Raised when a transaction cannot be compiled or signed."""


@dataclass(frozen=True, slots=True)
class AccountMeta:
    pubkey: Identity
    is_signer: bool
    is_writable: bool


@dataclass(frozen=True, slots=True)
class Instruction:
    program_id: Identity
    accounts: tuple[AccountMeta, ...]
    data: bytes


def encode_compact_u16(value: int) -> bytes:
    out = bytearray()
    while True:
        byte = value & 0x7F
        value >>= 7
        if value:
            out.append(byte | 0x80)
        else:
            out.append(byte)
            return bytes(out)


def _ordered_accounts(payer: Identity, instructions: Sequence[Instruction]) -> list[AccountMeta]:
    merged: dict[Identity, AccountMeta] = {payer: AccountMeta(payer, True, True)}
    for instruction in instructions:
        metas = [*instruction.accounts, AccountMeta(instruction.program_id, False, False)]
        for meta in metas:
            current = merged.get(meta.pubkey)
            if current is None:
                merged[meta.pubkey] = meta
            else:
                merged[meta.pubkey] = AccountMeta(
                    meta.pubkey,
                    current.is_signer or meta.is_signer,
                    current.is_writable or meta.is_writable,
                )
    rest = [meta for key, meta in merged.items() if key != payer]
    # Stable sort keeps first-seen order inside each signer/writable class.
    rest.sort(key=lambda meta: (not meta.is_signer, not meta.is_writable))
    return [merged[payer], *rest]


def compile_message(payer: Identity, instructions: Sequence[Instruction], recent_blockhash: str) -> tuple[bytes, list[Identity]]:
    """Serialize a legacy message; return it with the ordered signer keys."""
    if not instructions:
        raise TransactionError("A transaction needs at least one instruction.")
    accounts = _ordered_accounts(payer, instructions)
    index = {meta.pubkey: position for position, meta in enumerate(accounts)}
    signers = [meta for meta in accounts if meta.is_signer]
    readonly_signed = sum(1 for meta in signers if not meta.is_writable)
    readonly_unsigned = sum(1 for meta in accounts if not meta.is_signer and not meta.is_writable)

    blockhash = b58decode(recent_blockhash)
    if len(blockhash) != 32:
        raise TransactionError("Recent blockhash must decode to 32 bytes.")

    message = bytearray([len(signers), readonly_signed, readonly_unsigned])
    message += encode_compact_u16(len(accounts))
    for meta in accounts:
        message += meta.pubkey.raw
    message += blockhash
    message += encode_compact_u16(len(instructions))
    for instruction in instructions:
        message.append(index[instruction.program_id])
        message += encode_compact_u16(len(instruction.accounts))
        message += bytes(index[meta.pubkey] for meta in instruction.accounts)
        message += encode_compact_u16(len(instruction.data))
        message += instruction.data
    return bytes(message), [meta.pubkey for meta in signers]


def sign_transaction(
    payer: Identity,
    instructions: Sequence[Instruction],
    recent_blockhash: str,
    signers: Sequence[Keypair],
) -> tuple[str, bytes]:
    """Return (base64 wire transaction, fee payer signature)."""
    message, required = compile_message(payer, instructions, recent_blockhash)
    by_identity = {keypair.identity: keypair for keypair in signers}
    missing = [str(key) for key in required if key not in by_identity]
    if missing:
        raise TransactionError(f"Missing signatures for: {', '.join(missing)}")
    signatures = [by_identity[key].sign(message) for key in required]
    wire = encode_compact_u16(len(signatures)) + b"".join(signatures) + message
    return base64.b64encode(wire).decode("ascii"), signatures[0]


__all__ = [
    "AccountMeta",
    "Instruction",
    "TransactionError",
    "compile_message",
    "encode_compact_u16",
    "sign_transaction",
]
