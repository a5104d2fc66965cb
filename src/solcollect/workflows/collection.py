"""Collection workflow: mint a collection root (or a member) NFT.

Every run generates a fresh mint keypair, so running the workflow twice
creates two independent collections. Callers that want a single collection
must keep the mint address reported by the first run.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from solcollect.solana.intents import build_create_intent
from solcollect.solana.keys import Identity, Keypair

from .base import WorkflowContext, WorkflowResult, upload_content

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MintRequest:
    image_path: Path
    name: str
    symbol: str
    description: str = ""
    seller_fee_basis_points: int = 0
    collection: Identity | None = None
    is_mutable: bool = True


def create_collection(ctx: WorkflowContext, request: MintRequest) -> WorkflowResult:
    """Mint a collection root record (is_collection=true, no pointer)."""
    if request.collection is not None:
        raise ValueError("A collection root cannot point at another collection.")
    return _mint(ctx, request, is_collection=True, commitment=ctx.create_commitment)


def mint_nft(ctx: WorkflowContext, request: MintRequest) -> WorkflowResult:
    """Mint a member NFT, optionally with an unverified collection pointer."""
    return _mint(ctx, request, is_collection=False, commitment=ctx.commitment)


def _mint(ctx: WorkflowContext, request: MintRequest, *, is_collection: bool, commitment: str) -> WorkflowResult:
    ctx.ensure_funded()
    uploaded = upload_content(
        ctx,
        request.image_path,
        name=request.name,
        symbol=request.symbol,
        description=request.description,
        seller_fee_basis_points=request.seller_fee_basis_points,
    )

    mint = Keypair.generate()
    intent = build_create_intent(
        mint=mint.identity,
        authority=ctx.identity,
        name=request.name,
        symbol=request.symbol,
        uri=uploaded.metadata_uri,
        seller_fee_basis_points=request.seller_fee_basis_points,
        is_collection=is_collection,
        collection=request.collection,
        is_mutable=request.is_mutable,
    )
    label = "collection NFT" if is_collection else "NFT"
    ctx.log.record("ledger", f"Creating {label} {mint.identity}…", step="submit-create")
    confirmation = ctx.ledger.submit(intent, [ctx.signer, mint], commitment)
    logger.info("Created %s %s (%s)", label, mint.identity, confirmation.signature)

    locator = ctx.locator(mint.identity)
    ctx.log.record("ledger", f"Created {label} {mint.identity}: {locator}", step="submit-create")
    return WorkflowResult(
        mint=mint.identity,
        metadata_address=intent.metadata_address,
        signature=confirmation.signature,
        locator=locator,
        uploaded=uploaded,
    )


__all__ = ["MintRequest", "create_collection", "mint_nft"]
