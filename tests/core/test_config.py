from pathlib import Path
from typing import Any

import pytest
import tomli_w
import tomllib

from solcollect.core.config import (
    CONFIG_FILENAME,
    CollectConfig,
    ConfigManager,
    ConfigurationError,
)


def make_manager(tmp_path: Path, **kwargs: Any) -> ConfigManager:
    kwargs.setdefault("environ", {})
    kwargs.setdefault("echo_fn", lambda _message: None)
    return ConfigManager(config_dir=tmp_path, **kwargs)


def test_ensure_writes_defaults_on_first_run(tmp_path: Path) -> None:
    messages: list[str] = []
    manager = make_manager(tmp_path, echo_fn=messages.append)

    config = manager.ensure()

    assert isinstance(config, CollectConfig)
    assert config.network == "devnet"
    assert config.commitment == "confirmed"
    assert config.create_commitment == "finalized"
    assert config.airdrop_min_balance == 0.1
    assert config.airdrop_amount == 1.0
    assert (tmp_path / CONFIG_FILENAME).exists()
    assert any("Default solcollect configuration" in message for message in messages)


def test_project_and_override_layers_merge_in_order(tmp_path: Path) -> None:
    manager = make_manager(tmp_path)
    manager.ensure()

    project = tmp_path / "project.toml"
    project.write_text(tomli_w.dumps({"network": "testnet", "ledger": "local"}))
    override = tmp_path / "override.toml"
    override.write_text(tomli_w.dumps({"network": "mainnet-beta"}))

    layered = make_manager(tmp_path, project_config_path=project, override_config_path=override)
    config = layered.load()

    assert config.network == "mainnet-beta"
    assert config.ledger == "local"


def test_environment_overrides_win(tmp_path: Path) -> None:
    manager = make_manager(
        tmp_path,
        environ={"SOLCOLLECT_RPC_URL": "http://127.0.0.1:8899", "SOLCOLLECT_ASSET_STORE_TOKEN": "tok"},
    )
    config = manager.ensure()

    assert config.rpc_url == "http://127.0.0.1:8899"
    assert config.asset_store_token == "tok"


def test_update_persists_and_validates(tmp_path: Path) -> None:
    manager = make_manager(tmp_path)
    manager.ensure()

    updated = manager.update(commitment="finalized", airdrop_amount="2.5")

    assert updated.commitment == "finalized"
    assert updated.airdrop_amount == 2.5
    stored = tomllib.loads((tmp_path / CONFIG_FILENAME).read_text())
    assert stored["commitment"] == "finalized"

    with pytest.raises(ConfigurationError):
        manager.update(commitment="eventually")


def test_update_rejects_unknown_fields(tmp_path: Path) -> None:
    manager = make_manager(tmp_path)
    manager.ensure()

    with pytest.raises(ConfigurationError, match="Unknown config field"):
        manager.update(llm_model="demo")


def test_invalid_toml_raises_configuration_error(tmp_path: Path) -> None:
    (tmp_path / CONFIG_FILENAME).write_text("network = [unclosed")
    manager = make_manager(tmp_path)

    with pytest.raises(ConfigurationError):
        manager.load()
