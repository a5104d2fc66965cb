"""Token Metadata records: entity, derived addresses, and account decoding.

A metadata record lives at a program-derived address computed from the
mint identity and the ``"metadata"`` namespace seed, so any client holding a
mint can locate its record without an index.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any

from .borsh import BorshError, BorshReader
from .keys import Identity, find_program_address

TOKEN_METADATA_PROGRAM_ID = Identity.from_string("metaqbxxUerdq28cj1RbAWkYQm3ybzjb6a8bt518x1s")
SYSTEM_PROGRAM_ID = Identity.from_string("11111111111111111111111111111111")
SPL_TOKEN_PROGRAM_ID = Identity.from_string("TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA")
SPL_ATA_PROGRAM_ID = Identity.from_string("ATokenGPvbdGVxr1b2hvZbsiqW5xWH25efTNsLJA8knL")
SYSVAR_INSTRUCTIONS_ID = Identity.from_string("Sysvar1nstructions1111111111111111111111111")

METADATA_SEED = b"metadata"
EDITION_SEED = b"edition"
METADATA_V1_KEY = 4
TOKEN_STANDARD_NON_FUNGIBLE = 0

MAX_NAME_LENGTH = 32
MAX_SYMBOL_LENGTH = 10
MAX_URI_LENGTH = 200
MAX_SELLER_FEE_BASIS_POINTS = 10_000


class MetadataDecodeError(ValueError):
    """Raised when account data is not a Token Metadata record."""


@dataclass(frozen=True, slots=True)
class Creator:
    address: Identity
    verified: bool
    share: int

    def to_dict(self) -> dict[str, Any]:
        return {"address": str(self.address), "verified": self.verified, "share": self.share}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Creator":
        return cls(Identity.from_string(data["address"]), bool(data["verified"]), int(data["share"]))


@dataclass(frozen=True, slots=True)
class CollectionPointer:
    """Membership pointer from a member record to a collection mint."""

    key: Identity
    verified: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {"key": str(self.key), "verified": self.verified}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CollectionPointer":
        return cls(Identity.from_string(data["key"]), bool(data.get("verified", False)))


@dataclass(frozen=True, slots=True)
class MetadataRecord:
    """Snapshot of an on-chain metadata record."""

    mint: Identity
    update_authority: Identity
    name: str
    symbol: str
    uri: str
    seller_fee_basis_points: int = 0
    creators: tuple[Creator, ...] = field(default_factory=tuple)
    primary_sale_happened: bool = False
    is_mutable: bool = True
    token_standard: int | None = TOKEN_STANDARD_NON_FUNGIBLE
    collection: CollectionPointer | None = None
    is_collection: bool = False

    def __post_init__(self) -> None:
        validate_fields(self.name, self.symbol, self.uri, self.seller_fee_basis_points)

    @property
    def address(self) -> Identity:
        return find_metadata_pda(self.mint)

    @property
    def membership_state(self) -> str:
        if self.collection is None:
            return "unlinked"
        return "verified" if self.collection.verified else "unverified"

    def evolve(self, **changes: Any) -> "MetadataRecord":
        return replace(self, **changes)

    def to_dict(self) -> dict[str, Any]:
        return {
            "mint": str(self.mint),
            "update_authority": str(self.update_authority),
            "name": self.name,
            "symbol": self.symbol,
            "uri": self.uri,
            "seller_fee_basis_points": self.seller_fee_basis_points,
            "creators": [creator.to_dict() for creator in self.creators],
            "primary_sale_happened": self.primary_sale_happened,
            "is_mutable": self.is_mutable,
            "token_standard": self.token_standard,
            "collection": self.collection.to_dict() if self.collection else None,
            "is_collection": self.is_collection,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "MetadataRecord":
        collection = data.get("collection")
        return cls(
            mint=Identity.from_string(data["mint"]),
            update_authority=Identity.from_string(data["update_authority"]),
            name=data["name"],
            symbol=data["symbol"],
            uri=data["uri"],
            seller_fee_basis_points=int(data.get("seller_fee_basis_points", 0)),
            creators=tuple(Creator.from_dict(item) for item in data.get("creators") or []),
            primary_sale_happened=bool(data.get("primary_sale_happened", False)),
            is_mutable=bool(data.get("is_mutable", True)),
            token_standard=data.get("token_standard"),
            collection=CollectionPointer.from_dict(collection) if collection else None,
            is_collection=bool(data.get("is_collection", False)),
        )


def validate_fields(name: str, symbol: str, uri: str, seller_fee_basis_points: int) -> None:
    if len(name.encode("utf-8")) > MAX_NAME_LENGTH:
        raise ValueError(f"Name exceeds {MAX_NAME_LENGTH} bytes: {name!r}")
    if len(symbol.encode("utf-8")) > MAX_SYMBOL_LENGTH:
        raise ValueError(f"Symbol exceeds {MAX_SYMBOL_LENGTH} bytes: {symbol!r}")
    if len(uri.encode("utf-8")) > MAX_URI_LENGTH:
        raise ValueError(f"URI exceeds {MAX_URI_LENGTH} bytes")
    if not 0 <= seller_fee_basis_points <= MAX_SELLER_FEE_BASIS_POINTS:
        raise ValueError("seller_fee_basis_points must be between 0 and 10000")


def find_metadata_pda(mint: Identity) -> Identity:
    address, _bump = find_program_address(
        [METADATA_SEED, TOKEN_METADATA_PROGRAM_ID.raw, mint.raw],
        TOKEN_METADATA_PROGRAM_ID,
    )
    return address


def find_master_edition_pda(mint: Identity) -> Identity:
    address, _bump = find_program_address(
        [METADATA_SEED, TOKEN_METADATA_PROGRAM_ID.raw, mint.raw, EDITION_SEED],
        TOKEN_METADATA_PROGRAM_ID,
    )
    return address


def find_associated_token_address(owner: Identity, mint: Identity) -> Identity:
    address, _bump = find_program_address(
        [owner.raw, SPL_TOKEN_PROGRAM_ID.raw, mint.raw],
        SPL_ATA_PROGRAM_ID,
    )
    return address


def decode_metadata(data: bytes) -> MetadataRecord:
    """Decode a MetadataV1 account buffer."""
    reader = BorshReader(data)
    try:
        key = reader.u8()
        if key != METADATA_V1_KEY:
            raise MetadataDecodeError(f"Unexpected account key {key}; not a metadata record")
        update_authority = Identity(reader.fixed(32))
        mint = Identity(reader.fixed(32))
        name = reader.string()
        symbol = reader.string()
        uri = reader.string()
        seller_fee = reader.u16()
        creators: list[Creator] = []
        if reader.option():
            for _ in range(reader.u32()):
                creators.append(Creator(Identity(reader.fixed(32)), reader.bool(), reader.u8()))
        primary_sale = reader.bool()
        is_mutable = reader.bool()
        # Trailing fields were appended over program versions; short or zero
        # padded buffers decode as None.
        if reader.remaining and reader.option():
            reader.u8()  # edition nonce
        token_standard = reader.u8() if reader.remaining and reader.option() else None
        collection = None
        if reader.remaining and reader.option():
            verified = reader.bool()
            collection = CollectionPointer(Identity(reader.fixed(32)), verified)
        if reader.remaining and reader.option():
            reader.u8()
            reader.u64()
            reader.u64()
        is_collection = bool(reader.remaining and reader.option())
    except BorshError as exc:
        raise MetadataDecodeError(str(exc)) from exc
    return MetadataRecord(
        mint=mint,
        update_authority=update_authority,
        name=name,
        symbol=symbol,
        uri=uri,
        seller_fee_basis_points=seller_fee,
        creators=tuple(creators),
        primary_sale_happened=primary_sale,
        is_mutable=is_mutable,
        token_standard=token_standard,
        collection=collection,
        is_collection=is_collection,
    )


__all__ = [
    "CollectionPointer",
    "Creator",
    "MetadataDecodeError",
    "MetadataRecord",
    "SPL_ATA_PROGRAM_ID",
    "SPL_TOKEN_PROGRAM_ID",
    "SYSTEM_PROGRAM_ID",
    "SYSVAR_INSTRUCTIONS_ID",
    "TOKEN_METADATA_PROGRAM_ID",
    "decode_metadata",
    "find_associated_token_address",
    "find_master_edition_pda",
    "find_metadata_pda",
    "validate_fields",
]
