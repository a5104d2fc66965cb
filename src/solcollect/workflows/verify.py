"""Verification workflow: certify a member's collection pointer."""

from __future__ import annotations

import logging

from solcollect.solana.intents import build_verify_intent
from solcollect.solana.keys import Identity

from .base import WorkflowContext, WorkflowResult

logger = logging.getLogger(__name__)


def verify_collection(ctx: WorkflowContext, member_mint: Identity, collection_mint: Identity) -> WorkflowResult:
    """Flip the member's pointer to verified; the transition is one-way."""
    ctx.ensure_funded()
    intent = build_verify_intent(
        member_mint=member_mint,
        collection_mint=collection_mint,
        authority=ctx.identity,
    )
    ctx.log.record(
        "ledger",
        f"Verifying {member_mint} as a member of {collection_mint}…",
        step="submit-verify",
    )
    confirmation = ctx.ledger.submit(intent, [ctx.signer], ctx.commitment)
    logger.info("Verified %s in collection %s (%s)", member_mint, collection_mint, confirmation.signature)

    locator = ctx.locator(member_mint)
    ctx.log.record("ledger", f"Verified collection: {locator}", step="submit-verify")
    return WorkflowResult(
        mint=member_mint,
        metadata_address=intent.metadata_address,
        signature=confirmation.signature,
        locator=locator,
    )


__all__ = ["verify_collection"]
