"""Update workflow: re-upload content and repoint an existing record."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from solcollect.solana.intents import build_update_intent
from solcollect.solana.keys import Identity

from .base import WorkflowContext, WorkflowResult, upload_content

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UpdateRequest:
    mint: Identity
    image_path: Path
    name: str | None = None
    symbol: str | None = None
    description: str = ""
    seller_fee_basis_points: int = 0
    lock: bool = False


def update_nft(ctx: WorkflowContext, request: UpdateRequest) -> WorkflowResult:
    """Upload new content and mutate the record for `request.mint`.

    Content is always re-uploaded, even when unchanged, and the record is
    bound to the URI returned by this run. Authority and mutability are left
    to the ledger to enforce.
    """
    ctx.ensure_funded()
    current = ctx.ledger.fetch_metadata(request.mint)
    ctx.log.record("ledger", f"Found existing metadata for {request.mint}", step="fetch")

    name = current.name if request.name is None else request.name
    symbol = current.symbol if request.symbol is None else request.symbol
    uploaded = upload_content(
        ctx,
        request.image_path,
        name=name,
        symbol=symbol,
        description=request.description,
        seller_fee_basis_points=request.seller_fee_basis_points,
    )

    intent = build_update_intent(
        current,
        authority=ctx.identity,
        uri=uploaded.metadata_uri,
        name=name,
        symbol=symbol,
        seller_fee_basis_points=request.seller_fee_basis_points,
        lock=request.lock,
    )
    ctx.log.record("ledger", f"Updating metadata for {request.mint}…", step="submit-update")
    confirmation = ctx.ledger.submit(intent, [ctx.signer], ctx.commitment)
    logger.info("Updated %s (%s)", request.mint, confirmation.signature)

    locator = ctx.locator(request.mint)
    ctx.log.record("ledger", f"NFT updated with new metadata URI: {locator}", step="submit-update")
    return WorkflowResult(
        mint=request.mint,
        metadata_address=intent.metadata_address,
        signature=confirmation.signature,
        locator=locator,
        uploaded=uploaded,
    )


__all__ = ["UpdateRequest", "update_nft"]
