"""Ledger client contract and its Solana RPC implementation."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Protocol, Sequence

from solcollect.core.errors import (
    AuthorityMismatch,
    CollectionMismatch,
    FundingFailed,
    LedgerRejected,
    NetworkTimeout,
    NotACollection,
    RecordImmutable,
    RecordNotFound,
    WorkflowError,
)

from .instructions import encode_intent
from .intents import TransactionIntent, VerifyCollectionIntent
from .keys import Identity, Keypair
from .metadata import MetadataDecodeError, MetadataRecord, decode_metadata, find_metadata_pda
from .rpc import SolanaRPCClient, SolanaRPCError
from .transaction import TransactionError, sign_transaction

logger = logging.getLogger(__name__)

COMMITMENT_LEVELS = ("processed", "confirmed", "finalized")

# Program log fragments mapped onto the workflow error taxonomy.
REJECTION_HINTS: tuple[tuple[str, type[WorkflowError]], ...] = (
    ("data is immutable", RecordImmutable),
    ("update authority given does not match", AuthorityMismatch),
    ("collection update authority is invalid", AuthorityMismatch),
    ("update authority is not signer", AuthorityMismatch),
    ("not a collection parent", NotACollection),
    ("collection must be a unique master edition", NotACollection),
    ("collection not found on metadata", CollectionMismatch),
    ("incorrect account owner", RecordNotFound),
    ("uninitialized", RecordNotFound),
)


@dataclass(frozen=True, slots=True)
class Confirmation:
    """A transaction that reached the requested commitment level."""

    signature: str
    commitment: str
    slot: int | None = None


class LedgerClient(Protocol):
    def ensure_funded(self, identity: Identity, min_balance: float, airdrop_amount: float) -> float:
        ...

    def fetch_metadata(self, mint: Identity) -> MetadataRecord:
        ...

    def submit(self, intent: TransactionIntent, signers: Sequence[Keypair], commitment: str = "confirmed") -> Confirmation:
        ...


def validate_commitment(commitment: str) -> str:
    if commitment not in COMMITMENT_LEVELS:
        raise ValueError(f"Unknown commitment level {commitment!r}; expected one of {', '.join(COMMITMENT_LEVELS)}")
    return commitment


def commitment_reached(observed: str | None, requested: str) -> bool:
    if observed not in COMMITMENT_LEVELS:
        return False
    return COMMITMENT_LEVELS.index(observed) >= COMMITMENT_LEVELS.index(requested)


def classify_rejection(message: str, logs: Sequence[str], *, step: str, identity: str | None) -> WorkflowError:
    haystack = " ".join([message, *logs]).lower()
    for fragment, error_cls in REJECTION_HINTS:
        if fragment in haystack:
            return error_cls(message, step=step, identity=identity)
    return LedgerRejected(message, step=step, identity=identity)


def check_signers(intent: TransactionIntent, signers: Sequence[Keypair]) -> None:
    provided = {keypair.identity for keypair in signers}
    missing = sorted(str(key) for key in intent.required_signers - provided)
    if missing:
        raise AuthorityMismatch(
            f"Transaction requires signatures from: {', '.join(missing)}",
            step=f"submit-{intent.kind}",
            identity=missing[0],
        )


class SolanaLedgerClient:
    """Submits Token Metadata transactions through a Solana RPC node."""

    def __init__(
        self,
        rpc: SolanaRPCClient,
        *,
        confirm_timeout: float = 60.0,
        poll_interval: float = 1.0,
        airdrop_timeout: float = 30.0,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.rpc = rpc
        self.confirm_timeout = confirm_timeout
        self.poll_interval = poll_interval
        self.airdrop_timeout = airdrop_timeout
        self._sleep = sleep
        self._clock = clock

    def ensure_funded(self, identity: Identity, min_balance: float, airdrop_amount: float) -> float:
        address = str(identity)
        try:
            balance = self.rpc.get_balance(address)
        except SolanaRPCError as exc:
            raise FundingFailed(f"Unable to read balance: {exc}", step="fund", identity=address) from exc
        if balance >= min_balance:
            logger.debug("Balance %.9f SOL meets threshold %.3f for %s", balance, min_balance, address)
            return balance

        attempts = 3
        delay = 2.0
        last_err: Exception | None = None
        for attempt in range(attempts):
            try:
                signature = self.rpc.request_airdrop(address, airdrop_amount)
                logger.info("Requested %.3f SOL airdrop for %s (sig %s)", airdrop_amount, address, signature)
                break
            except SolanaRPCError as exc:
                last_err = exc
                if attempt < attempts - 1:
                    logger.warning("Faucet busy; retrying airdrop for %s", address)
                    self._sleep(delay)
                    delay *= 1.5
        else:
            raise FundingFailed(f"Airdrop failed: {last_err}", step="fund", identity=address) from last_err

        deadline = self._clock() + self.airdrop_timeout
        while self._clock() < deadline:
            self._sleep(self.poll_interval)
            try:
                current = self.rpc.get_balance(address)
            except SolanaRPCError:
                continue
            if current > balance:
                return current
        raise NetworkTimeout(
            f"Airdrop did not land within {self.airdrop_timeout:.0f} seconds",
            step="fund",
            identity=address,
        )

    def fetch_metadata(self, mint: Identity) -> MetadataRecord:
        address = find_metadata_pda(mint)
        try:
            data = self.rpc.get_account_data(str(address))
        except SolanaRPCError as exc:
            raise LedgerRejected(f"Unable to fetch metadata: {exc}", step="fetch", identity=str(mint)) from exc
        if data is None:
            raise RecordNotFound(f"No metadata record at {address}; mint was never minted as an NFT", step="fetch", identity=str(mint))
        try:
            return decode_metadata(data)
        except MetadataDecodeError as exc:
            raise RecordNotFound(f"Account {address} is not a metadata record: {exc}", step="fetch", identity=str(mint)) from exc

    def submit(self, intent: TransactionIntent, signers: Sequence[Keypair], commitment: str = "confirmed") -> Confirmation:
        validate_commitment(commitment)
        check_signers(intent, signers)
        step = f"submit-{intent.kind}"
        identity = str(intent.metadata_address)
        if isinstance(intent, VerifyCollectionIntent):
            self._require_collection(intent)
        instructions = encode_intent(intent)
        try:
            blockhash = self.rpc.get_latest_blockhash()
            wire, _signature = sign_transaction(intent.authority, instructions, blockhash, signers)
        except (SolanaRPCError, TransactionError) as exc:
            raise LedgerRejected(f"Unable to prepare transaction: {exc}", step=step, identity=identity) from exc

        try:
            signature = self.rpc.send_transaction(wire)
        except SolanaRPCError as exc:
            raise classify_rejection(str(exc), exc.logs, step=step, identity=identity) from exc
        logger.info("Submitted %s transaction %s", intent.kind, signature)
        return self._await_commitment(signature, commitment, step=step, identity=identity)

    def _require_collection(self, intent: VerifyCollectionIntent) -> None:
        # Unsized parents pass the on-chain check.
        collection = self.fetch_metadata(intent.collection_mint)
        if not collection.is_collection:
            raise NotACollection(
                f"{intent.collection_mint} is not flagged as a collection",
                step="submit-verify",
                identity=str(intent.collection_mint),
            )

    def _await_commitment(self, signature: str, commitment: str, *, step: str, identity: str) -> Confirmation:
        deadline = self._clock() + self.confirm_timeout
        while True:
            try:
                status = self.rpc.get_signature_status(signature)
            except SolanaRPCError as exc:
                logger.debug("Signature status lookup failed: %s", exc)
                status = None
            if status:
                if status.get("err"):
                    raise classify_rejection(f"Transaction {signature} failed: {status['err']}", [], step=step, identity=identity)
                if commitment_reached(status.get("confirmationStatus"), commitment):
                    return Confirmation(signature=signature, commitment=commitment, slot=status.get("slot"))
            if self._clock() >= deadline:
                raise NetworkTimeout(
                    f"Transaction {signature} not {commitment} within {self.confirm_timeout:.0f} seconds",
                    step=step,
                    identity=identity,
                )
            self._sleep(self.poll_interval)


__all__ = [
    "COMMITMENT_LEVELS",
    "Confirmation",
    "LedgerClient",
    "SolanaLedgerClient",
    "check_signers",
    "classify_rejection",
    "commitment_reached",
    "validate_commitment",
]
