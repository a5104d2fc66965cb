from solcollect.core.config import CollectConfig
from solcollect.solana.keys import Keypair
from solcollect.workflows import WorkflowContext, explorer_link, rpc_endpoint


def test_explorer_link_per_network() -> None:
    assert explorer_link("address", "Abc", "mainnet-beta") == "https://explorer.solana.com/address/Abc"
    assert explorer_link("address", "Abc", "devnet") == "https://explorer.solana.com/address/Abc?cluster=devnet"
    assert explorer_link("tx", "Sig", "localnet", rpc_url="http://127.0.0.1:8899") == (
        "https://explorer.solana.com/tx/Sig?cluster=custom&customUrl=http%3A%2F%2F127.0.0.1%3A8899"
    )


def test_context_from_config_uses_localnet_for_local_ledger(ledger, assets) -> None:
    config = CollectConfig(ledger="local", commitment="processed", airdrop_amount=2.0)

    ctx = WorkflowContext.from_config(config, signer=Keypair.generate(), ledger=ledger, assets=assets)

    assert ctx.network == "localnet"
    assert ctx.commitment == "processed"
    assert ctx.create_commitment == "finalized"
    assert ctx.airdrop_amount == 2.0
    assert "cluster=custom" in ctx.locator(ctx.identity)


def test_ensure_funded_records_signer(make_context) -> None:
    ctx = make_context()

    balance = ctx.ensure_funded()

    assert balance == 1.0
    entry = ctx.log.latest()
    assert entry is not None and entry.category == "wallet" and str(ctx.identity) in entry.message


def test_rpc_endpoint_follows_network_unless_overridden() -> None:
    assert rpc_endpoint(CollectConfig()) == "https://api.devnet.solana.com"
    assert rpc_endpoint(CollectConfig(network="testnet")) == "https://api.testnet.solana.com"
    assert rpc_endpoint(CollectConfig(network="testnet", rpc_url="http://rpc.local")) == "http://rpc.local"
