"""Solana-focused utilities for solcollect."""

from .intents import (
    CreateRecordIntent,
    TransactionIntent,
    UpdateRecordIntent,
    VerifyCollectionIntent,
    build_create_intent,
    build_update_intent,
    build_verify_intent,
)
from .keys import Identity, Keypair, KeypairError, load_keypair
from .ledger import Confirmation, LedgerClient, SolanaLedgerClient
from .local import LocalLedger
from .metadata import CollectionPointer, Creator, MetadataRecord, find_metadata_pda
from .rpc import SolanaRPCClient, SolanaRPCError

__all__ = [
    "CollectionPointer",
    "Confirmation",
    "CreateRecordIntent",
    "Creator",
    "Identity",
    "Keypair",
    "KeypairError",
    "LedgerClient",
    "LocalLedger",
    "MetadataRecord",
    "SolanaLedgerClient",
    "SolanaRPCClient",
    "SolanaRPCError",
    "TransactionIntent",
    "UpdateRecordIntent",
    "VerifyCollectionIntent",
    "build_create_intent",
    "build_update_intent",
    "build_verify_intent",
    "find_metadata_pda",
    "load_keypair",
]
