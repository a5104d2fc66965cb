import json
from pathlib import Path

import pytest

from solcollect.core.errors import AssetUnavailable
from solcollect.solana.keys import Keypair
from solcollect.workflows import MintRequest, create_collection, mint_nft


def test_create_collection_end_to_end(make_context, ledger, assets, image: Path) -> None:
    ctx = make_context()

    result = create_collection(
        ctx,
        MintRequest(image_path=image, name="My NFT Collection", symbol="MNC", description="My Collection description"),
    )

    record = ledger.fetch_metadata(result.mint)
    assert result.mint != ctx.identity
    assert record.is_collection
    assert record.collection is None
    assert record.update_authority == ctx.identity
    document = json.loads(assets.fetch(record.uri))
    assert document["name"] == "My NFT Collection"
    assert assets.fetch(document["image"]) == image.read_bytes()


def test_create_collection_mints_fresh_identity_each_run(make_context, image: Path) -> None:
    ctx = make_context()
    request = MintRequest(image_path=image, name="My NFT Collection", symbol="MNC")

    first = create_collection(ctx, request)
    second = create_collection(ctx, request)

    assert first.mint != second.mint


def test_create_collection_rejects_pointer(make_context, image: Path) -> None:
    request = MintRequest(image_path=image, name="Root", symbol="R", collection=Keypair.generate().identity)
    with pytest.raises(ValueError):
        create_collection(make_context(), request)


def test_missing_image_fails_before_any_upload(make_context, assets, tmp_path: Path) -> None:
    ctx = make_context()

    with pytest.raises(AssetUnavailable) as excinfo:
        create_collection(ctx, MintRequest(image_path=tmp_path / "collection.png", name="C", symbol="C"))

    assert excinfo.value.step == "read-asset"
    assert list(assets.root.iterdir()) == []


def test_invalid_fields_fail_before_any_upload(make_context, assets, image: Path) -> None:
    with pytest.raises(ValueError):
        create_collection(make_context(), MintRequest(image_path=image, name="x" * 40, symbol="C"))
    assert list(assets.root.iterdir()) == []


def test_mint_nft_sets_unverified_pointer(make_context, ledger, image: Path) -> None:
    ctx = make_context()
    collection = create_collection(ctx, MintRequest(image_path=image, name="C", symbol="C"))

    member = mint_nft(ctx, MintRequest(image_path=image, name="My NFT", symbol="MN", collection=collection.mint))

    record = ledger.fetch_metadata(member.mint)
    assert not record.is_collection
    assert record.membership_state == "unverified"
    assert record.collection is not None and record.collection.key == collection.mint


def test_progress_is_logged_per_step(make_context, image: Path) -> None:
    ctx = make_context()

    create_collection(ctx, MintRequest(image_path=image, name="C", symbol="C"))

    steps = [entry.step for entry in ctx.log.recent(limit=50)]
    assert steps.index("fund") < steps.index("upload-image") < steps.index("upload-json") < steps.index("submit-create")
