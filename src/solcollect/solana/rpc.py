"""Solana JSON-RPC helpers."""

from __future__ import annotations

import base64
import logging
from dataclasses import dataclass
from typing import Any, Callable

import httpx

logger = logging.getLogger(__name__)

LAMPORTS_PER_SOL = 1_000_000_000

CLUSTER_URLS = {
    "devnet": "https://api.devnet.solana.com",
    "testnet": "https://api.testnet.solana.com",
    "mainnet-beta": "https://api.mainnet-beta.solana.com",
    "localnet": "http://127.0.0.1:8899",
}


class SolanaRPCError(RuntimeError):
    """Raised when Solana RPC calls fail."""

    def __init__(self, message: str, *, code: int | None = None, data: Any = None) -> None:
        super().__init__(message)
        self.code = code
        self.data = data

    @property
    def logs(self) -> list[str]:
        if isinstance(self.data, dict) and isinstance(self.data.get("logs"), list):
            return [str(line) for line in self.data["logs"]]
        return []


RequestFn = Callable[[str, Any], httpx.Response]


def cluster_url(network: str) -> str:
    return CLUSTER_URLS.get(network, CLUSTER_URLS["devnet"])


@dataclass
class SolanaRPCClient:
    """Thin wrapper around Solana's JSON-RPC interface."""

    endpoint: str
    timeout: float = 10.0
    _request: RequestFn | None = None

    def __post_init__(self) -> None:
        if self._request is None:
            self._request = httpx.post
        self._next_id = 1

    def call(self, method: str, params: list[Any] | None = None) -> Any:
        """Invoke `method` and return the `result` member of the response."""
        payload = {
            "jsonrpc": "2.0",
            "id": self._next_id,
            "method": method,
            "params": params or [],
        }
        self._next_id += 1
        try:
            response = self._request(self.endpoint, json=payload, timeout=self.timeout)  # type: ignore[arg-type]
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise SolanaRPCError(f"RPC request failed: {exc}") from exc

        try:
            data = response.json()
        except ValueError as exc:  # pragma: no cover - unexpected for compliant RPC
            raise SolanaRPCError("Invalid JSON in RPC response") from exc

        if "error" in data:
            error = data["error"] or {}
            message = error.get("message", "Unknown RPC error")
            raise SolanaRPCError(message, code=error.get("code"), data=error.get("data"))

        if "result" not in data:
            raise SolanaRPCError(f"Malformed RPC response for {method}; missing result")
        logger.debug("RPC %s succeeded", method)
        return data["result"]

    def get_balance(self, public_key: str) -> float:
        """Return balance for `public_key` in SOL."""
        result = self.call("getBalance", [public_key, {"commitment": "confirmed"}])
        try:
            lamports = result["value"]
        except (KeyError, TypeError) as exc:
            raise SolanaRPCError("Malformed RPC response; missing balance value") from exc

        if not isinstance(lamports, int):
            raise SolanaRPCError("Balance value is not an integer")

        balance = lamports / LAMPORTS_PER_SOL
        logger.debug("Fetched balance %.9f SOL for %s", balance, public_key)
        return balance

    def request_airdrop(self, public_key: str, amount_sol: float) -> str:
        lamports = int(round(amount_sol * LAMPORTS_PER_SOL))
        signature = self.call("requestAirdrop", [public_key, lamports])
        if not isinstance(signature, str):
            raise SolanaRPCError("Airdrop response did not include a signature")
        return signature

    def get_account_data(self, public_key: str, *, commitment: str = "confirmed") -> bytes | None:
        """Return raw account data, or None when the account does not exist."""
        result = self.call("getAccountInfo", [public_key, {"encoding": "base64", "commitment": commitment}])
        value = (result or {}).get("value")
        if value is None:
            return None
        try:
            encoded = value["data"][0]
        except (KeyError, IndexError, TypeError) as exc:
            raise SolanaRPCError("Malformed account info response") from exc
        return base64.b64decode(encoded)

    def get_latest_blockhash(self, *, commitment: str = "finalized") -> str:
        result = self.call("getLatestBlockhash", [{"commitment": commitment}])
        try:
            return str(result["value"]["blockhash"])
        except (KeyError, TypeError) as exc:
            raise SolanaRPCError("Malformed blockhash response") from exc

    def send_transaction(self, wire: str, *, preflight_commitment: str = "confirmed") -> str:
        """Submit a base64-encoded signed transaction and return its signature."""
        signature = self.call(
            "sendTransaction",
            [wire, {"encoding": "base64", "preflightCommitment": preflight_commitment}],
        )
        if not isinstance(signature, str):
            raise SolanaRPCError("sendTransaction did not return a signature")
        return signature

    def get_signature_status(self, signature: str) -> dict[str, Any] | None:
        result = self.call("getSignatureStatuses", [[signature], {"searchTransactionHistory": False}])
        values = (result or {}).get("value") or [None]
        return values[0]


__all__ = ["LAMPORTS_PER_SOL", "SolanaRPCClient", "SolanaRPCError", "cluster_url"]
