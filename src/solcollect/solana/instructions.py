"""Token Metadata instruction encoding for transaction intents."""

from __future__ import annotations

from .borsh import BorshWriter
from .intents import (
    CreateRecordIntent,
    TransactionIntent,
    UpdateRecordIntent,
    VerifyCollectionIntent,
)
from .keys import Identity
from .metadata import (
    SPL_ATA_PROGRAM_ID,
    SPL_TOKEN_PROGRAM_ID,
    SYSTEM_PROGRAM_ID,
    SYSVAR_INSTRUCTIONS_ID,
    TOKEN_METADATA_PROGRAM_ID,
    TOKEN_STANDARD_NON_FUNGIBLE,
    Creator,
    find_associated_token_address,
    find_master_edition_pda,
    find_metadata_pda,
)
from .transaction import AccountMeta, Instruction

CREATE_DISCRIMINATOR = 42
MINT_DISCRIMINATOR = 43
UPDATE_DISCRIMINATOR = 50
VERIFY_DISCRIMINATOR = 52
VERIFY_COLLECTION_V1 = 1
PRINT_SUPPLY_ZERO = 0
COLLECTION_DETAILS_V1 = 0


def _writable(key: Identity, *, signer: bool = False) -> AccountMeta:
    return AccountMeta(key, signer, True)


def _readonly(key: Identity, *, signer: bool = False) -> AccountMeta:
    return AccountMeta(key, signer, False)


def _absent() -> AccountMeta:
    # Omitted optional accounts are passed as the program id itself.
    return _readonly(TOKEN_METADATA_PROGRAM_ID)


def _write_creators(writer: BorshWriter, creators: tuple[Creator, ...]) -> None:
    if not creators:
        writer.none()
        return
    writer.some().u32(len(creators))
    for creator in creators:
        writer.fixed(creator.address.raw).bool(creator.verified).u8(creator.share)


def encode_create(intent: CreateRecordIntent) -> list[Instruction]:
    """Create the record and master edition, then mint the single token."""
    metadata = find_metadata_pda(intent.mint)
    edition = find_master_edition_pda(intent.mint)

    writer = BorshWriter().u8(CREATE_DISCRIMINATOR).u8(0)
    writer.string(intent.name).string(intent.symbol).string(intent.uri)
    writer.u16(intent.seller_fee_basis_points)
    _write_creators(writer, intent.creators)
    writer.bool(False).bool(intent.is_mutable).u8(TOKEN_STANDARD_NON_FUNGIBLE)
    if intent.collection is None:
        writer.none()
    else:
        writer.some().bool(intent.collection.verified).fixed(intent.collection.key.raw)
    writer.none()  # uses
    if intent.is_collection:
        writer.some().u8(COLLECTION_DETAILS_V1).u64(0)
    else:
        writer.none()
    writer.none()  # rule set
    writer.some().u8(0)  # decimals
    writer.some().u8(PRINT_SUPPLY_ZERO)

    create = Instruction(
        program_id=TOKEN_METADATA_PROGRAM_ID,
        accounts=(
            _writable(metadata),
            _writable(edition),
            _writable(intent.mint, signer=True),
            _readonly(intent.authority, signer=True),
            _writable(intent.authority, signer=True),
            _readonly(intent.authority),
            _readonly(SYSTEM_PROGRAM_ID),
            _readonly(SYSVAR_INSTRUCTIONS_ID),
            _readonly(SPL_TOKEN_PROGRAM_ID),
        ),
        data=writer.to_bytes(),
    )

    token = find_associated_token_address(intent.authority, intent.mint)
    mint_data = BorshWriter().u8(MINT_DISCRIMINATOR).u8(0).u64(1).none().to_bytes()
    mint = Instruction(
        program_id=TOKEN_METADATA_PROGRAM_ID,
        accounts=(
            _writable(token),
            _readonly(intent.authority),
            _readonly(metadata),
            _writable(edition),
            _absent(),
            _writable(intent.mint),
            _readonly(intent.authority, signer=True),
            _absent(),
            _writable(intent.authority, signer=True),
            _readonly(SYSTEM_PROGRAM_ID),
            _readonly(SYSVAR_INSTRUCTIONS_ID),
            _readonly(SPL_TOKEN_PROGRAM_ID),
            _readonly(SPL_ATA_PROGRAM_ID),
            _absent(),
            _absent(),
        ),
        data=mint_data,
    )
    return [create, mint]


def encode_update(intent: UpdateRecordIntent) -> list[Instruction]:
    writer = BorshWriter().u8(UPDATE_DISCRIMINATOR).u8(0)
    writer.none()  # new update authority
    writer.some().string(intent.name).string(intent.symbol).string(intent.uri)
    writer.u16(intent.seller_fee_basis_points)
    _write_creators(writer, intent.creators)
    for flag in (intent.primary_sale_happened, intent.is_mutable):
        if flag is None:
            writer.none()
        else:
            writer.some().bool(flag)
    # collection, collection details, uses, rule set toggles all "None".
    writer.u8(0).u8(0).u8(0).u8(0)
    writer.none()  # authorization data

    return [
        Instruction(
            program_id=TOKEN_METADATA_PROGRAM_ID,
            accounts=(
                _readonly(intent.authority, signer=True),
                _absent(),
                _absent(),
                _readonly(intent.mint),
                _writable(find_metadata_pda(intent.mint)),
                _absent(),
                _writable(intent.authority, signer=True),
                _readonly(SYSTEM_PROGRAM_ID),
                _readonly(SYSVAR_INSTRUCTIONS_ID),
                _absent(),
                _absent(),
            ),
            data=writer.to_bytes(),
        )
    ]


def encode_verify(intent: VerifyCollectionIntent) -> list[Instruction]:
    data = BorshWriter().u8(VERIFY_DISCRIMINATOR).u8(VERIFY_COLLECTION_V1).to_bytes()
    return [
        Instruction(
            program_id=TOKEN_METADATA_PROGRAM_ID,
            accounts=(
                _readonly(intent.authority, signer=True),
                _absent(),
                _writable(intent.metadata_address),
                _readonly(intent.collection_mint),
                _writable(intent.collection_metadata_address),
                _readonly(find_master_edition_pda(intent.collection_mint)),
                _readonly(SYSTEM_PROGRAM_ID),
                _readonly(SYSVAR_INSTRUCTIONS_ID),
            ),
            data=data,
        )
    ]


def encode_intent(intent: TransactionIntent) -> list[Instruction]:
    if isinstance(intent, CreateRecordIntent):
        return encode_create(intent)
    if isinstance(intent, UpdateRecordIntent):
        return encode_update(intent)
    if isinstance(intent, VerifyCollectionIntent):
        return encode_verify(intent)
    raise TypeError(f"Unsupported intent type: {type(intent).__name__}")


__all__ = ["encode_create", "encode_intent", "encode_update", "encode_verify"]
