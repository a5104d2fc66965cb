"""Core services for solcollect."""

from .config import (
    DEFAULT_CONFIG_DIR,
    CollectConfig,
    ConfigManager,
    ConfigurationError,
)
from .errors import (
    AssetUnavailable,
    AuthorityMismatch,
    CollectionMismatch,
    FundingFailed,
    LedgerRejected,
    NetworkTimeout,
    NotACollection,
    RecordImmutable,
    RecordNotFound,
    UploadFailed,
    WorkflowError,
)
from .logs import LogBuffer, LogEntry
from .storage import AssetStore, HttpAssetStore, LocalAssetStore, OffchainMetadata, read_asset

__all__ = [
    "AssetStore",
    "AssetUnavailable",
    "AuthorityMismatch",
    "CollectConfig",
    "CollectionMismatch",
    "ConfigManager",
    "ConfigurationError",
    "DEFAULT_CONFIG_DIR",
    "FundingFailed",
    "HttpAssetStore",
    "LedgerRejected",
    "LocalAssetStore",
    "LogBuffer",
    "LogEntry",
    "NetworkTimeout",
    "NotACollection",
    "OffchainMetadata",
    "RecordImmutable",
    "RecordNotFound",
    "UploadFailed",
    "WorkflowError",
    "read_asset",
]
