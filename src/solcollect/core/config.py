"""Configuration management for solcollect."""

from __future__ import annotations

import os
import tomllib
from collections.abc import Callable, Mapping
from copy import deepcopy
from pathlib import Path
from typing import Any, Literal

import tomli_w
import typer
from pydantic import BaseModel, Field, ValidationError

DEFAULT_CONFIG_DIR = Path(os.environ.get("SOLCOLLECT_HOME", Path.home() / ".solcollect"))
CONFIG_FILENAME = "config.toml"
PROJECT_DIRNAME = ".solcollect"

ENV_OVERRIDES = {
    "SOLCOLLECT_RPC_URL": "rpc_url",
    "SOLCOLLECT_KEYPAIR": "keypair_path",
    "SOLCOLLECT_ASSET_STORE_TOKEN": "asset_store_token",
}

Commitment = Literal["processed", "confirmed", "finalized"]


class ConfigurationError(RuntimeError):
    """Raised when configuration loading fails."""


class CollectConfig(BaseModel):
    """Persisted solcollect configuration settings."""

    config_version: int = 1
    network: str = "devnet"
    # Unset means the public endpoint for `network`.
    rpc_url: str | None = None
    commitment: Commitment = "confirmed"
    create_commitment: Commitment = "finalized"
    confirm_timeout_secs: float = Field(default=60.0, gt=0)
    airdrop_min_balance: float = Field(default=0.1, ge=0)
    airdrop_amount: float = Field(default=1.0, gt=0)
    airdrop_timeout_secs: float = Field(default=30.0, gt=0)
    keypair_path: str = "~/.config/solana/id.json"
    ledger: Literal["solana", "local"] = "solana"
    local_ledger_path: str = ".solcollect/ledger.json"
    asset_store: Literal["local", "http"] = "local"
    asset_store_url: str = "https://api.nft.storage/upload"
    asset_store_token: str | None = None
    gateway_url: str = "https://ipfs.io/ipfs"
    uploads_dir: str = ".solcollect/uploads"


class ConfigManager:
    """Loads the layered solcollect configuration and persists the base layer.

    Layers apply in order: the global ``config.toml``, the project file under
    ``.solcollect/``, an explicit ``--config`` file, then ``SOLCOLLECT_*``
    environment variables.
    """

    def __init__(
        self,
        config_dir: Path | None = None,
        echo_fn: Callable[[str], None] | None = None,
        project_config_path: Path | None = None,
        override_config_path: Path | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        self.config_dir = config_dir or DEFAULT_CONFIG_DIR
        self.config_path = self.config_dir / CONFIG_FILENAME
        self.project_config_path = project_config_path
        self.override_config_path = override_config_path
        self._echo = echo_fn or typer.echo
        self._environ = os.environ if environ is None else environ

    @property
    def layers(self) -> list[Path]:
        return [path for path in (self.config_path, self.project_config_path, self.override_config_path) if path]

    def ensure(self) -> CollectConfig:
        """Load configuration, writing defaults on first run."""
        if not self.config_path.exists():
            self.save(CollectConfig())
            self._echo(f"✅ Default solcollect configuration written to {self.config_path}")
        return self.load()

    def load(self) -> CollectConfig:
        data: dict[str, Any] = {}
        for layer in self.layers:
            data = merge_layers(data, read_toml(layer))
        data.update({field: self._environ[name] for name, field in ENV_OVERRIDES.items() if self._environ.get(name)})
        return _build(data)

    def save(self, config: CollectConfig) -> None:
        self.config_dir.mkdir(parents=True, exist_ok=True)
        self.config_path.write_text(tomli_w.dumps(config.model_dump(exclude_none=True)))

    def update(self, **updates: object) -> CollectConfig:
        """Validate and persist `updates` into the base config file."""
        unknown = sorted(set(updates) - set(CollectConfig.model_fields))
        if unknown:
            raise ConfigurationError(f"Unknown config field(s): {', '.join(unknown)}")
        config = _build({**read_toml(self.config_path), **updates})
        self.save(config)
        return config


def read_toml(path: Path) -> dict[str, Any]:
    """Return the table stored at `path`, or an empty one if it is absent."""
    if not path.is_file():
        return {}
    try:
        with path.open("rb") as handle:
            return tomllib.load(handle)
    except (OSError, tomllib.TOMLDecodeError) as exc:
        raise ConfigurationError(f"Failed to load config from {path}: {exc}") from exc


def merge_layers(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    merged = deepcopy(dict(base))
    for key, value in override.items():
        current = merged.get(key)
        merged[key] = merge_layers(current, value) if isinstance(current, dict) and isinstance(value, dict) else value
    return merged


def _build(data: Mapping[str, Any]) -> CollectConfig:
    try:
        return CollectConfig(**data)
    except ValidationError as exc:
        raise ConfigurationError(str(exc)) from exc


__all__ = [
    "CONFIG_FILENAME",
    "DEFAULT_CONFIG_DIR",
    "PROJECT_DIRNAME",
    "CollectConfig",
    "ConfigManager",
    "ConfigurationError",
    "merge_layers",
    "read_toml",
]
