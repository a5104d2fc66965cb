"""CLI package for solcollect."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from importlib import metadata
from pathlib import Path
from typing import Callable, TypeVar

import tomli_w
import typer
from rich.table import Table
from rich.text import Text

from solcollect.core import (
    DEFAULT_CONFIG_DIR,
    CollectConfig,
    ConfigManager,
    ConfigurationError,
    HttpAssetStore,
    LocalAssetStore,
    LogBuffer,
    WorkflowError,
)
from solcollect.core.config import CONFIG_FILENAME, PROJECT_DIRNAME
from solcollect.core.storage import AssetStore
from solcollect.solana import (
    Identity,
    Keypair,
    KeypairError,
    LedgerClient,
    LocalLedger,
    SolanaLedgerClient,
    SolanaRPCClient,
    SolanaRPCError,
    load_keypair,
)
from solcollect.solana.keys import save_keypair
from solcollect.workflows import (
    MintRequest,
    UpdateRequest,
    WorkflowContext,
    WorkflowResult,
    create_collection,
    mint_nft,
    rpc_endpoint,
    update_nft,
    verify_collection,
)

from .branding import create_semantic_panel, format_progress, themed_console

logger = logging.getLogger(__name__)

app = typer.Typer(help="Mint, update, and verify Solana NFT collections.", no_args_is_help=True)
config_app = typer.Typer(help="Inspect or change solcollect configuration.", no_args_is_help=True)
app.add_typer(config_app, name="config")

CLI_CONSOLE = themed_console()
LOCAL_KEYPAIR_FILENAME = "local-id.json"

T = TypeVar("T")


@dataclass
class CLIState:
    config_file: Path | None = None
    keypair: Path | None = None
    local: bool = False
    verbose: bool = False


def styled_echo(message: str = "", *, nl: bool = True, markup: bool = True) -> None:
    """Print using the solcollect themed console without wrapping long links."""
    CLI_CONSOLE.print(message, end="" if not nl else "\n", markup=markup, soft_wrap=True)


def _configure_logging(verbose: bool, log_dir: Path | None) -> None:
    root_logger = logging.getLogger()
    if verbose:
        if not root_logger.handlers:
            logging.basicConfig(level=logging.DEBUG, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
        root_logger.setLevel(logging.DEBUG)
    else:
        if root_logger.handlers:
            root_logger.setLevel(logging.WARNING)
        else:
            logging.basicConfig(level=logging.WARNING, format="%(message)s")
    if verbose and log_dir is not None:
        log_path = (log_dir / "solcollect.log").resolve()
        if any(
            isinstance(existing, logging.FileHandler) and Path(existing.baseFilename).resolve() == log_path
            for existing in root_logger.handlers
        ):
            return
        log_dir.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(log_path, encoding="utf-8")
        handler.setLevel(logging.DEBUG)
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
        root_logger.addHandler(handler)


def _project_home() -> Path:
    return Path.cwd() / PROJECT_DIRNAME


def _config_manager(state: CLIState) -> ConfigManager:
    override: Path | None = None
    if state.config_file is not None:
        override = state.config_file.expanduser()
        if not override.exists():
            raise ConfigurationError(f"Config file '{override}' not found.")
        override = override.resolve()

    project_config: Path | None = None
    if override is None:
        candidate = _project_home() / CONFIG_FILENAME
        if candidate.exists():
            project_config = candidate

    return ConfigManager(
        config_dir=DEFAULT_CONFIG_DIR,
        echo_fn=styled_echo,
        project_config_path=project_config,
        override_config_path=override,
    )


def _load_config(state: CLIState) -> CollectConfig:
    config = _config_manager(state).ensure()
    if state.local:
        config = config.model_copy(update={"ledger": "local", "asset_store": "local"})
    return config


def _load_signer(state: CLIState, config: CollectConfig) -> Keypair:
    if state.keypair is not None:
        return load_keypair(state.keypair)
    default_path = Path(config.keypair_path).expanduser()
    if config.ledger == "local" and not default_path.exists():
        # Offline runs get a throwaway project keypair instead of failing.
        local_path = _project_home() / LOCAL_KEYPAIR_FILENAME
        if local_path.exists():
            return load_keypair(local_path)
        keypair = Keypair.generate()
        save_keypair(keypair, local_path)
        styled_echo(f"🔑 Generated local keypair at {local_path}")
        return keypair
    return load_keypair(default_path)


def _build_ledger(config: CollectConfig) -> LedgerClient:
    if config.ledger == "local":
        return LocalLedger(Path(config.local_ledger_path).expanduser())
    return SolanaLedgerClient(
        SolanaRPCClient(endpoint=rpc_endpoint(config)),
        confirm_timeout=config.confirm_timeout_secs,
        airdrop_timeout=config.airdrop_timeout_secs,
    )


def _build_asset_store(config: CollectConfig) -> AssetStore:
    if config.asset_store == "http":
        return HttpAssetStore(
            config.asset_store_url,
            token=config.asset_store_token,
            gateway_url=config.gateway_url or None,
        )
    return LocalAssetStore(Path(config.uploads_dir))


def _build_context(state: CLIState) -> WorkflowContext:
    config = _load_config(state)
    signer = _load_signer(state, config)
    log = LogBuffer()
    log.subscribe(lambda entry: CLI_CONSOLE.print(format_progress(entry)))
    return WorkflowContext.from_config(
        config,
        signer=signer,
        ledger=_build_ledger(config),
        assets=_build_asset_store(config),
        log=log,
    )


def _guarded(action: Callable[[], T]) -> T:
    """Run `action`, reporting failures with context and exiting non-zero."""
    try:
        return action()
    except WorkflowError as exc:
        logger.error("Workflow failed: %s", exc.describe())
        CLI_CONSOLE.print(create_semantic_panel(exc.describe(), panel_type="error", title=type(exc).__name__))
        raise typer.Exit(code=1) from exc
    except (ConfigurationError, KeypairError, SolanaRPCError, ValueError) as exc:
        logger.error("Invocation failed: %s", exc)
        CLI_CONSOLE.print(create_semantic_panel(str(exc), panel_type="error", title=type(exc).__name__))
        raise typer.Exit(code=1) from exc


def _parse_identity(value: str, label: str) -> Identity:
    try:
        return Identity.from_string(value)
    except KeypairError as exc:
        raise typer.BadParameter(f"{label} is not a valid address: {exc}") from exc


def _report(result: WorkflowResult, label: str) -> None:
    styled_echo(f"{label}: {result.locator}")
    styled_echo(f"{label} address is: {result.mint}")
    styled_echo(f"Transaction signature: {result.signature}")
    CLI_CONSOLE.print(create_semantic_panel("Finished successfully!", panel_type="success"))


@app.callback()
def main_callback(
    ctx: typer.Context,
    config: Path | None = typer.Option(None, "--config", help="Use an alternate config file and skip project overrides"),  # noqa: B008
    keypair: Path | None = typer.Option(None, "--keypair", "-k", help="Signer keypair file (solana-keygen JSON)"),  # noqa: B008
    local: bool = typer.Option(False, "--local", help="Use the file-backed local ledger and asset store"),  # noqa: B008
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),  # noqa: B008
) -> None:
    """Mint, update, and verify Solana NFT collections."""
    _configure_logging(verbose, log_dir=_project_home() / "logs")
    ctx.obj = CLIState(config_file=config, keypair=keypair, local=local, verbose=verbose)


@app.command("create-collection")
def create_collection_command(
    ctx: typer.Context,
    image: Path = typer.Option(Path("collection.png"), "--image", help="Collection image file"),  # noqa: B008
    name: str = typer.Option("My NFT Collection", "--name"),  # noqa: B008
    symbol: str = typer.Option("MNC", "--symbol"),  # noqa: B008
    description: str = typer.Option("My Collection description", "--description"),  # noqa: B008
    seller_fee_bps: int = typer.Option(0, "--seller-fee-bps", min=0, max=10_000),  # noqa: B008
) -> None:
    """Mint a new collection NFT. Each run creates a new collection."""
    state: CLIState = ctx.obj
    request = MintRequest(
        image_path=image,
        name=name,
        symbol=symbol,
        description=description,
        seller_fee_basis_points=seller_fee_bps,
    )
    result = _guarded(lambda: create_collection(_build_context(state), request))
    _report(result, "Collection NFT")


@app.command("mint")
def mint_command(
    ctx: typer.Context,
    image: Path = typer.Option(Path("nft.png"), "--image", help="NFT image file"),  # noqa: B008
    name: str = typer.Option("My NFT", "--name"),  # noqa: B008
    symbol: str = typer.Option("MN", "--symbol"),  # noqa: B008
    description: str = typer.Option("", "--description"),  # noqa: B008
    collection: str | None = typer.Option(None, "--collection", help="Collection mint to point at (unverified)"),  # noqa: B008
    seller_fee_bps: int = typer.Option(0, "--seller-fee-bps", min=0, max=10_000),  # noqa: B008
) -> None:
    """Mint a member NFT, optionally pointing at a collection."""
    state: CLIState = ctx.obj
    request = MintRequest(
        image_path=image,
        name=name,
        symbol=symbol,
        description=description,
        seller_fee_basis_points=seller_fee_bps,
        collection=_parse_identity(collection, "--collection") if collection else None,
    )
    result = _guarded(lambda: mint_nft(_build_context(state), request))
    _report(result, "NFT")


@app.command("update")
def update_command(
    ctx: typer.Context,
    mint: str = typer.Option(..., "--mint", help="Mint address of the NFT to update"),  # noqa: B008
    image: Path = typer.Option(Path("nft.png"), "--image", help="Replacement image file"),  # noqa: B008
    name: str | None = typer.Option(None, "--name", help="New name (defaults to the current one)"),  # noqa: B008
    symbol: str | None = typer.Option(None, "--symbol", help="New symbol (defaults to the current one)"),  # noqa: B008
    description: str = typer.Option("", "--description"),  # noqa: B008
    seller_fee_bps: int = typer.Option(0, "--seller-fee-bps", min=0, max=10_000),  # noqa: B008
    lock: bool = typer.Option(False, "--lock", help="Make the record immutable after this update"),  # noqa: B008
) -> None:
    """Upload new content and point an existing NFT at it."""
    state: CLIState = ctx.obj
    request = UpdateRequest(
        mint=_parse_identity(mint, "--mint"),
        image_path=image,
        name=name,
        symbol=symbol,
        description=description,
        seller_fee_basis_points=seller_fee_bps,
        lock=lock,
    )
    result = _guarded(lambda: update_nft(_build_context(state), request))
    _report(result, "Updated NFT")


@app.command("verify")
def verify_command(
    ctx: typer.Context,
    mint: str = typer.Option(..., "--mint", help="Member NFT mint"),  # noqa: B008
    collection: str = typer.Option(..., "--collection", help="Collection NFT mint"),  # noqa: B008
) -> None:
    """Verify an NFT as a certified member of a collection."""
    state: CLIState = ctx.obj
    member = _parse_identity(mint, "--mint")
    collection_mint = _parse_identity(collection, "--collection")
    result = _guarded(lambda: verify_collection(_build_context(state), member, collection_mint))
    _report(result, "Verified NFT")


@app.command("show")
def show_command(
    ctx: typer.Context,
    mint: str = typer.Option(..., "--mint", help="Mint address to inspect"),  # noqa: B008
) -> None:
    """Print the metadata record for a mint."""
    state: CLIState = ctx.obj
    mint_id = _parse_identity(mint, "--mint")

    def _fetch():
        config = _load_config(state)
        return _build_ledger(config).fetch_metadata(mint_id)

    record = _guarded(_fetch)
    table = Table(title=f"Metadata {record.address}", show_header=False)
    for key, value in record.to_dict().items():
        table.add_row(key, Text(str(value)))
    table.add_row("membership", record.membership_state)
    CLI_CONSOLE.print(table)


@config_app.command("show")
def config_show(ctx: typer.Context) -> None:
    """Print the effective configuration."""
    state: CLIState = ctx.obj
    config = _guarded(lambda: _load_config(state))
    data = config.model_dump(exclude_none=True)
    if data.get("asset_store_token"):
        data["asset_store_token"] = "••••"
    styled_echo(tomli_w.dumps(data).rstrip(), markup=False)


@config_app.command("set")
def config_set(ctx: typer.Context, key: str, value: str) -> None:
    """Persist KEY=VALUE into the global config file."""
    state: CLIState = ctx.obj
    _guarded(lambda: _config_manager(state).update(**{key: value}))
    styled_echo(f"✅ Set {key}.")


@app.command()
def version() -> None:
    """Show CLI version."""
    try:
        pkg_version = metadata.version("solcollect")
    except metadata.PackageNotFoundError:
        pkg_version = "0.0.0"
    styled_echo(f"solcollect version {pkg_version}")


def main() -> None:
    """Console entrypoint."""
    app()


__all__ = ["app", "main"]
