import logging
import re
from pathlib import Path

import pytest
from typer.testing import CliRunner

import solcollect.cli as cli
from solcollect.core.config import CollectConfig
from solcollect.solana.keys import Keypair, save_keypair

runner = CliRunner()

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + bytes(range(32))


@pytest.fixture()
def workspace(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(cli, "DEFAULT_CONFIG_DIR", tmp_path / "home")
    for name in ("SOLCOLLECT_RPC_URL", "SOLCOLLECT_KEYPAIR", "SOLCOLLECT_ASSET_STORE_TOKEN"):
        monkeypatch.delenv(name, raising=False)
    (tmp_path / "collection.png").write_bytes(PNG_BYTES)
    (tmp_path / "nft.png").write_bytes(PNG_BYTES)
    return tmp_path


def make_keypair(workspace: Path, name: str = "id.json") -> Path:
    return save_keypair(Keypair.generate(), workspace / name)


def invoke(keypair: Path, *args: str):
    return runner.invoke(cli.app, ["--local", "--keypair", str(keypair), *args])


def minted_address(output: str) -> str:
    match = re.search(r"address is: (\w+)", output)
    assert match, output
    return match.group(1)


def test_create_collection_reports_locator(workspace: Path) -> None:
    result = invoke(make_keypair(workspace), "create-collection", "--name", "My NFT Collection")

    assert result.exit_code == 0, result.output
    address = minted_address(result.output)
    assert f"https://explorer.solana.com/address/{address}?cluster=custom" in result.output
    assert "Finished successfully" in result.output
    assert (workspace / ".solcollect" / "ledger.json").exists()


def test_full_lifecycle_through_cli(workspace: Path) -> None:
    keypair = make_keypair(workspace)
    collection = minted_address(invoke(keypair, "create-collection").output)
    member = minted_address(invoke(keypair, "mint", "--collection", collection).output)

    updated = invoke(keypair, "update", "--mint", member, "--name", "Updated Asset", "--symbol", "UPDATED")
    verified = invoke(keypair, "verify", "--mint", member, "--collection", collection)
    shown = invoke(keypair, "show", "--mint", member)

    assert updated.exit_code == 0, updated.output
    assert verified.exit_code == 0, verified.output
    assert shown.exit_code == 0, shown.output
    assert "Updated Asset" in shown.output
    assert re.search(r"membership\W+verified", shown.output), shown.output


def test_missing_image_exits_non_zero_with_context(workspace: Path) -> None:
    result = invoke(make_keypair(workspace), "create-collection", "--image", "absent.png")

    assert result.exit_code == 1
    assert "AssetUnavailable" in result.output
    assert "read-asset" in result.output


def test_verify_with_foreign_signer_fails(workspace: Path) -> None:
    owner = make_keypair(workspace, "owner.json")
    stranger = make_keypair(workspace, "stranger.json")
    collection = minted_address(invoke(owner, "create-collection").output)
    member = minted_address(invoke(owner, "mint", "--collection", collection).output)

    result = invoke(stranger, "verify", "--mint", member, "--collection", collection)

    assert result.exit_code == 1
    assert "AuthorityMismatch" in result.output


def test_invalid_address_is_a_usage_error(workspace: Path) -> None:
    result = invoke(make_keypair(workspace), "verify", "--mint", "not-base58!", "--collection", "also-bad")

    assert result.exit_code == 2


def test_local_mode_generates_project_keypair(workspace: Path) -> None:
    set_result = runner.invoke(cli.app, ["config", "set", "keypair_path", str(workspace / "missing.json")])
    assert set_result.exit_code == 0, set_result.output

    result = runner.invoke(cli.app, ["--local", "create-collection"])

    assert result.exit_code == 0, result.output
    assert (workspace / ".solcollect" / cli.LOCAL_KEYPAIR_FILENAME).exists()


def test_config_set_and_show(workspace: Path) -> None:
    set_result = runner.invoke(cli.app, ["config", "set", "commitment", "finalized"])
    shown = runner.invoke(cli.app, ["config", "show"])

    assert set_result.exit_code == 0, set_result.output
    assert 'commitment = "finalized"' in shown.output


def test_config_set_rejects_unknown_key(workspace: Path) -> None:
    result = runner.invoke(cli.app, ["config", "set", "llm_model", "demo"])

    assert result.exit_code == 1
    assert "Unknown config field" in result.output


def test_show_unknown_mint_fails(workspace: Path) -> None:
    result = invoke(make_keypair(workspace), "show", "--mint", str(Keypair.generate().identity))

    assert result.exit_code == 1
    assert "RecordNotFound" in result.output


def test_network_setting_selects_rpc_endpoint() -> None:
    ledger = cli._build_ledger(CollectConfig(network="testnet"))

    assert ledger.rpc.endpoint == "https://api.testnet.solana.com"


def test_verbose_logging_adds_one_file_handler(tmp_path: Path) -> None:
    root = logging.getLogger()
    before = list(root.handlers)
    level = root.level
    try:
        cli._configure_logging(True, tmp_path / "logs")
        cli._configure_logging(True, tmp_path / "logs")
        added = [handler for handler in root.handlers if handler not in before and isinstance(handler, logging.FileHandler)]
        assert len(added) == 1
    finally:
        for handler in root.handlers[:]:
            if handler not in before:
                root.removeHandler(handler)
                handler.close()
        root.setLevel(level)
