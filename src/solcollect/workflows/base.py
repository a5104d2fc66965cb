"""Shared workflow plumbing: context, results, uploads, explorer links."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any
from urllib.parse import quote

from solcollect.core.config import CollectConfig
from solcollect.core.logs import LogBuffer
from solcollect.core.storage import AssetStore, OffchainMetadata, read_asset
from solcollect.solana.keys import Identity, Keypair
from solcollect.solana.ledger import LedgerClient
from solcollect.solana.metadata import validate_fields
from solcollect.solana.rpc import cluster_url

logger = logging.getLogger(__name__)

EXPLORER_BASE_URL = "https://explorer.solana.com"


@dataclass
class WorkflowContext:
    """Everything a workflow needs, passed explicitly per invocation."""

    signer: Keypair
    ledger: LedgerClient
    assets: AssetStore
    network: str = "devnet"
    rpc_url: str | None = None
    commitment: str = "confirmed"
    create_commitment: str = "finalized"
    airdrop_min_balance: float = 0.1
    airdrop_amount: float = 1.0
    log: LogBuffer = field(default_factory=LogBuffer)

    @classmethod
    def from_config(
        cls,
        config: CollectConfig,
        *,
        signer: Keypair,
        ledger: LedgerClient,
        assets: AssetStore,
        log: LogBuffer | None = None,
    ) -> "WorkflowContext":
        return cls(
            signer=signer,
            ledger=ledger,
            assets=assets,
            network="localnet" if config.ledger == "local" else config.network,
            rpc_url=None if config.ledger == "local" else rpc_endpoint(config),
            commitment=config.commitment,
            create_commitment=config.create_commitment,
            airdrop_min_balance=config.airdrop_min_balance,
            airdrop_amount=config.airdrop_amount,
            log=log or LogBuffer(),
        )

    @property
    def identity(self) -> Identity:
        return self.signer.identity

    def ensure_funded(self) -> float:
        balance = self.ledger.ensure_funded(self.identity, self.airdrop_min_balance, self.airdrop_amount)
        self.log.record("wallet", f"Loaded signer {self.identity} ({balance:.3f} SOL)", step="fund")
        return balance

    def locator(self, address: Identity | str) -> str:
        return explorer_link("address", str(address), self.network, rpc_url=self.rpc_url)


@dataclass(frozen=True)
class UploadedContent:
    image_uri: str
    metadata_uri: str
    document: dict[str, Any]


@dataclass(frozen=True)
class WorkflowResult:
    """Outcome reported to the caller after confirmation."""

    mint: Identity
    metadata_address: Identity
    signature: str
    locator: str
    uploaded: UploadedContent | None = None


def rpc_endpoint(config: CollectConfig) -> str:
    """Return the configured RPC URL, falling back to the public one for the network."""
    return config.rpc_url or cluster_url(config.network)


def explorer_link(kind: str, address: str, network: str, *, rpc_url: str | None = None) -> str:
    """Build a Solana explorer URL for an address or transaction."""
    url = f"{EXPLORER_BASE_URL}/{kind}/{address}"
    if network == "mainnet-beta":
        return url
    if network in {"localnet", "custom"}:
        custom = rpc_url or "http://localhost:8899"
        return f"{url}?cluster=custom&customUrl={quote(custom, safe='')}"
    return f"{url}?cluster={network}"


def upload_content(
    ctx: WorkflowContext,
    image_path: Path,
    *,
    name: str,
    symbol: str,
    description: str,
    seller_fee_basis_points: int = 0,
    extra: dict[str, Any] | None = None,
) -> UploadedContent:
    """Upload the image, then the JSON document that references it.

    Field validation and the local file read both happen before the first
    upload, so a bad input never leaves orphaned content behind.
    """
    validate_fields(name, symbol, "", seller_fee_basis_points)
    asset = read_asset(image_path)

    ctx.log.record("upload", f"Uploading image {asset.filename} ({len(asset.data)} bytes)…", step="upload-image")
    image_uri = ctx.assets.upload(asset.data, asset.content_type, asset.filename)
    ctx.log.record("upload", f"Image URI: {image_uri}", step="upload-image")

    document = OffchainMetadata(
        name=name,
        symbol=symbol,
        description=description,
        image=image_uri,
        **(extra or {}),
    ).to_document()
    ctx.log.record("upload", "Uploading metadata…", step="upload-json")
    metadata_uri = ctx.assets.upload_json(document)
    ctx.log.record("upload", f"Offchain metadata URI: {metadata_uri}", step="upload-json")
    logger.debug("Uploaded content pair image=%s metadata=%s", image_uri, metadata_uri)
    return UploadedContent(image_uri=image_uri, metadata_uri=metadata_uri, document=document)


__all__ = [
    "UploadedContent",
    "WorkflowContext",
    "WorkflowResult",
    "explorer_link",
    "rpc_endpoint",
    "upload_content",
]
