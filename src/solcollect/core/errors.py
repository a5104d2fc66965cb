"""Workflow error taxonomy."""

from __future__ import annotations


class WorkflowError(RuntimeError):
    """Base class for failures that abort a workflow invocation."""

    retryable = False

    def __init__(self, message: str, *, step: str | None = None, identity: str | None = None) -> None:
        super().__init__(message)
        self.step = step
        self.identity = identity

    def describe(self) -> str:
        parts = [str(self)]
        if self.step:
            parts.append(f"step={self.step}")
        if self.identity:
            parts.append(f"identity={self.identity}")
        return " | ".join(parts)


class AssetUnavailable(WorkflowError):
    """Required local input file is missing."""


class UploadFailed(WorkflowError):
    """The asset store rejected or failed an upload."""

    retryable = True


class RecordNotFound(WorkflowError):
    """No metadata record exists for the given mint."""


class AuthorityMismatch(WorkflowError):
    """Signer is not the update authority of the record."""


class RecordImmutable(WorkflowError):
    """The target record has been locked (is_mutable=false)."""


class NotACollection(WorkflowError):
    """The named collection record is not flagged as a collection."""


class CollectionMismatch(WorkflowError):
    """Member record has no pointer to the named collection."""


class FundingFailed(WorkflowError):
    """The signer could not be funded to the required balance."""

    retryable = True


class NetworkTimeout(WorkflowError):
    """Confirmation was not reached within the configured bound."""

    retryable = True


class LedgerRejected(WorkflowError):
    """The ledger rejected a transaction for a reason outside the taxonomy."""


__all__ = [
    "WorkflowError",
    "AssetUnavailable",
    "UploadFailed",
    "RecordNotFound",
    "AuthorityMismatch",
    "RecordImmutable",
    "NotACollection",
    "CollectionMismatch",
    "NetworkTimeout",
    "FundingFailed",
    "LedgerRejected",
]
