from solcollect.core.errors import (
    AssetUnavailable,
    AuthorityMismatch,
    FundingFailed,
    NetworkTimeout,
    RecordImmutable,
    UploadFailed,
    WorkflowError,
)


def test_describe_includes_step_and_identity() -> None:
    error = AuthorityMismatch("signer cannot update", step="submit-update", identity="Mint111")
    assert error.describe() == "signer cannot update | step=submit-update | identity=Mint111"


def test_describe_without_context_is_message() -> None:
    assert WorkflowError("boom").describe() == "boom"


def test_retryable_flags_follow_remediation() -> None:
    assert UploadFailed("x").retryable
    assert NetworkTimeout("x").retryable
    assert FundingFailed("x").retryable
    assert not AssetUnavailable("x").retryable
    assert not RecordImmutable("x").retryable


def test_taxonomy_shares_a_base_class() -> None:
    assert issubclass(AssetUnavailable, WorkflowError)
    assert issubclass(RecordImmutable, RuntimeError)
