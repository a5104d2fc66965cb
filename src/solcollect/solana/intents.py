"""Immutable transaction intents.

Workflows build one of these values first and hand it to a ledger client's
``submit`` afterwards, so intent construction can be tested without a
network.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from .keys import Identity
from .metadata import (
    CollectionPointer,
    Creator,
    MetadataRecord,
    find_metadata_pda,
    validate_fields,
)


@dataclass(frozen=True, slots=True)
class CreateRecordIntent:
    """Mint a new NFT and create its metadata record."""

    mint: Identity
    authority: Identity
    name: str
    symbol: str
    uri: str
    seller_fee_basis_points: int = 0
    creators: tuple[Creator, ...] = ()
    is_mutable: bool = True
    collection: CollectionPointer | None = None
    is_collection: bool = False

    kind = "create"

    @property
    def metadata_address(self) -> Identity:
        return find_metadata_pda(self.mint)

    @property
    def required_signers(self) -> frozenset[Identity]:
        return frozenset({self.authority, self.mint})


@dataclass(frozen=True, slots=True)
class UpdateRecordIntent:
    """Replace the data section of an existing record."""

    mint: Identity
    authority: Identity
    name: str
    symbol: str
    uri: str
    seller_fee_basis_points: int
    creators: tuple[Creator, ...]
    primary_sale_happened: bool | None = True
    is_mutable: bool | None = None

    kind = "update"

    @property
    def metadata_address(self) -> Identity:
        return find_metadata_pda(self.mint)

    @property
    def required_signers(self) -> frozenset[Identity]:
        return frozenset({self.authority})


@dataclass(frozen=True, slots=True)
class VerifyCollectionIntent:
    """Certify a member record's pointer to a collection."""

    member_mint: Identity
    collection_mint: Identity
    authority: Identity

    kind = "verify"

    @property
    def metadata_address(self) -> Identity:
        return find_metadata_pda(self.member_mint)

    @property
    def collection_metadata_address(self) -> Identity:
        return find_metadata_pda(self.collection_mint)

    @property
    def required_signers(self) -> frozenset[Identity]:
        return frozenset({self.authority})


TransactionIntent = Union[CreateRecordIntent, UpdateRecordIntent, VerifyCollectionIntent]


def build_create_intent(
    *,
    mint: Identity,
    authority: Identity,
    name: str,
    symbol: str,
    uri: str,
    seller_fee_basis_points: int = 0,
    is_collection: bool = False,
    collection: Identity | None = None,
    is_mutable: bool = True,
) -> CreateRecordIntent:
    validate_fields(name, symbol, uri, seller_fee_basis_points)
    if is_collection and collection is not None:
        raise ValueError("A collection root cannot itself point at a collection.")
    return CreateRecordIntent(
        mint=mint,
        authority=authority,
        name=name,
        symbol=symbol,
        uri=uri,
        seller_fee_basis_points=seller_fee_basis_points,
        creators=(Creator(address=authority, verified=True, share=100),),
        is_mutable=is_mutable,
        collection=CollectionPointer(collection, verified=False) if collection else None,
        is_collection=is_collection,
    )


def build_update_intent(
    record: MetadataRecord,
    *,
    authority: Identity,
    uri: str,
    name: str | None = None,
    symbol: str | None = None,
    seller_fee_basis_points: int = 0,
    lock: bool = False,
) -> UpdateRecordIntent:
    """Copy `record` and override the fields being changed."""
    new_name = record.name if name is None else name
    new_symbol = record.symbol if symbol is None else symbol
    validate_fields(new_name, new_symbol, uri, seller_fee_basis_points)
    return UpdateRecordIntent(
        mint=record.mint,
        authority=authority,
        name=new_name,
        symbol=new_symbol,
        uri=uri,
        seller_fee_basis_points=seller_fee_basis_points,
        creators=record.creators,
        primary_sale_happened=True,
        is_mutable=False if lock else None,
    )


def build_verify_intent(*, member_mint: Identity, collection_mint: Identity, authority: Identity) -> VerifyCollectionIntent:
    if member_mint == collection_mint:
        raise ValueError("A record cannot be verified as a member of itself.")
    return VerifyCollectionIntent(member_mint=member_mint, collection_mint=collection_mint, authority=authority)


__all__ = [
    "CreateRecordIntent",
    "TransactionIntent",
    "UpdateRecordIntent",
    "VerifyCollectionIntent",
    "build_create_intent",
    "build_update_intent",
    "build_verify_intent",
]
