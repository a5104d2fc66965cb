from __future__ import annotations

from pathlib import Path
from typing import Callable

import pytest

from solcollect.core.storage import LocalAssetStore
from solcollect.solana.keys import Keypair
from solcollect.solana.local import LocalLedger
from solcollect.workflows import WorkflowContext

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + bytes(range(32))

ContextFactory = Callable[..., WorkflowContext]


@pytest.fixture()
def ledger() -> LocalLedger:
    return LocalLedger()


@pytest.fixture()
def image(tmp_path: Path) -> Path:
    path = tmp_path / "nft.png"
    path.write_bytes(PNG_BYTES)
    return path


@pytest.fixture()
def assets(tmp_path: Path) -> LocalAssetStore:
    return LocalAssetStore(tmp_path / "up")


@pytest.fixture()
def make_context(ledger: LocalLedger, assets: LocalAssetStore) -> ContextFactory:
    def factory(signer: Keypair | None = None, **kwargs) -> WorkflowContext:
        return WorkflowContext(signer=signer or Keypair.generate(), ledger=ledger, assets=assets, **kwargs)

    return factory
