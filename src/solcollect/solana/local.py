"""File-backed ledger that enforces Token Metadata preconditions locally.

Used for offline runs (``--local``) and in tests. Each ``submit`` is applied
atomically: preconditions are checked against a snapshot, and state is only
written once every check has passed.
"""

from __future__ import annotations

import hashlib
import json
import logging
from pathlib import Path
from typing import Any, Sequence

from solcollect.core.errors import (
    AuthorityMismatch,
    CollectionMismatch,
    LedgerRejected,
    NotACollection,
    RecordImmutable,
    RecordNotFound,
)

from .intents import (
    CreateRecordIntent,
    TransactionIntent,
    UpdateRecordIntent,
    VerifyCollectionIntent,
)
from .keys import Identity, Keypair, b58encode
from .ledger import Confirmation, check_signers, validate_commitment
from .metadata import CollectionPointer, MetadataRecord, find_metadata_pda
from .rpc import LAMPORTS_PER_SOL

logger = logging.getLogger(__name__)


class LocalLedger:
    """In-process ledger persisted as JSON when `path` is given."""

    def __init__(self, path: Path | None = None) -> None:
        self.path = path
        self._records: dict[str, MetadataRecord] = {}
        self._balances: dict[str, int] = {}
        self._slot = 0
        if path is not None and path.exists():
            self._load()

    # ------------------------------------------------------------------
    # Ledger client API
    # ------------------------------------------------------------------
    def ensure_funded(self, identity: Identity, min_balance: float, airdrop_amount: float) -> float:
        address = str(identity)
        lamports = self._balances.get(address, 0)
        if lamports >= int(min_balance * LAMPORTS_PER_SOL):
            return lamports / LAMPORTS_PER_SOL
        lamports += int(airdrop_amount * LAMPORTS_PER_SOL)
        self._balances[address] = lamports
        self._persist()
        logger.info("Local airdrop of %.3f SOL to %s", airdrop_amount, address)
        return lamports / LAMPORTS_PER_SOL

    def fetch_metadata(self, mint: Identity) -> MetadataRecord:
        record = self._records.get(str(find_metadata_pda(mint)))
        if record is None:
            raise RecordNotFound(f"No metadata record for mint {mint}", step="fetch", identity=str(mint))
        return record

    def submit(self, intent: TransactionIntent, signers: Sequence[Keypair], commitment: str = "confirmed") -> Confirmation:
        validate_commitment(commitment)
        check_signers(intent, signers)
        if isinstance(intent, CreateRecordIntent):
            updated = self._apply_create(intent)
        elif isinstance(intent, UpdateRecordIntent):
            updated = self._apply_update(intent)
        elif isinstance(intent, VerifyCollectionIntent):
            updated = self._apply_verify(intent)
        else:
            raise TypeError(f"Unsupported intent type: {type(intent).__name__}")

        self._records[str(updated.address)] = updated
        self._slot += 1
        self._persist()
        signature = self._sign(intent, signers)
        logger.info("Applied %s intent for %s at slot %d", intent.kind, updated.mint, self._slot)
        return Confirmation(signature=signature, commitment=commitment, slot=self._slot)

    # ------------------------------------------------------------------
    # Preconditions
    # ------------------------------------------------------------------
    def _apply_create(self, intent: CreateRecordIntent) -> MetadataRecord:
        address = str(intent.metadata_address)
        if address in self._records:
            raise LedgerRejected(f"Mint {intent.mint} already has a metadata record", step="submit-create", identity=address)
        return MetadataRecord(
            mint=intent.mint,
            update_authority=intent.authority,
            name=intent.name,
            symbol=intent.symbol,
            uri=intent.uri,
            seller_fee_basis_points=intent.seller_fee_basis_points,
            creators=intent.creators,
            is_mutable=intent.is_mutable,
            collection=intent.collection,
            is_collection=intent.is_collection,
        )

    def _apply_update(self, intent: UpdateRecordIntent) -> MetadataRecord:
        step = "submit-update"
        current = self._require(intent.mint, step=step)
        address = str(current.address)
        if not current.is_mutable:
            raise RecordImmutable(f"Record for {intent.mint} is immutable", step=step, identity=address)
        if intent.authority != current.update_authority:
            raise AuthorityMismatch(
                f"{intent.authority} is not the update authority of {intent.mint}",
                step=step,
                identity=str(intent.authority),
            )
        return current.evolve(
            name=intent.name,
            symbol=intent.symbol,
            uri=intent.uri,
            seller_fee_basis_points=intent.seller_fee_basis_points,
            creators=intent.creators,
            primary_sale_happened=current.primary_sale_happened if intent.primary_sale_happened is None else intent.primary_sale_happened,
            is_mutable=current.is_mutable if intent.is_mutable is None else intent.is_mutable,
        )

    def _apply_verify(self, intent: VerifyCollectionIntent) -> MetadataRecord:
        step = "submit-verify"
        member = self._require(intent.member_mint, step=step)
        collection = self._require(intent.collection_mint, step=step)
        if not collection.is_collection:
            raise NotACollection(
                f"{intent.collection_mint} is not flagged as a collection",
                step=step,
                identity=str(intent.collection_mint),
            )
        if intent.authority != collection.update_authority:
            raise AuthorityMismatch(
                f"{intent.authority} is not the update authority of collection {intent.collection_mint}",
                step=step,
                identity=str(intent.authority),
            )
        if member.collection is None or member.collection.key != intent.collection_mint:
            raise CollectionMismatch(
                f"{intent.member_mint} does not point at collection {intent.collection_mint}",
                step=step,
                identity=str(intent.member_mint),
            )
        if member.collection.verified:
            return member
        return member.evolve(collection=CollectionPointer(intent.collection_mint, verified=True))

    def _require(self, mint: Identity, *, step: str) -> MetadataRecord:
        record = self._records.get(str(find_metadata_pda(mint)))
        if record is None:
            raise RecordNotFound(f"No metadata record for mint {mint}", step=step, identity=str(mint))
        return record

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------
    def _sign(self, intent: TransactionIntent, signers: Sequence[Keypair]) -> str:
        payload = json.dumps([intent.kind, str(intent.metadata_address), self._slot]).encode("utf-8")
        payer = next(keypair for keypair in signers if keypair.identity == intent.authority)
        return b58encode(payer.sign(hashlib.sha256(payload).digest()))

    def _load(self) -> None:
        assert self.path is not None
        try:
            data: dict[str, Any] = json.loads(self.path.read_text())
        except (OSError, json.JSONDecodeError) as exc:
            raise LedgerRejected(f"Unable to read local ledger {self.path}: {exc}", step="load") from exc
        self._records = {address: MetadataRecord.from_dict(item) for address, item in data.get("records", {}).items()}
        self._balances = {key: int(value) for key, value in data.get("balances", {}).items()}
        self._slot = int(data.get("slot", 0))

    def _persist(self) -> None:
        if self.path is None:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = {
            "slot": self._slot,
            "balances": self._balances,
            "records": {address: record.to_dict() for address, record in self._records.items()},
        }
        tmp_path = self.path.with_suffix(".tmp")
        tmp_path.write_text(json.dumps(payload, indent=2))
        tmp_path.replace(self.path)


__all__ = ["LocalLedger"]
