"""Asset store clients for off-chain NFT content (images and metadata JSON)."""

from __future__ import annotations

import json
import logging
import mimetypes
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Protocol
from urllib.parse import urlparse
from urllib.request import url2pathname

import httpx
from pydantic import BaseModel, ConfigDict

from .errors import AssetUnavailable, UploadFailed

logger = logging.getLogger(__name__)


class OffchainMetadata(BaseModel):
    """Off-chain JSON document referenced by a metadata record's uri."""

    model_config = ConfigDict(extra="allow")

    name: str
    symbol: str
    description: str = ""
    image: str

    def to_document(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


@dataclass(frozen=True)
class LocalAsset:
    path: Path
    data: bytes
    content_type: str

    @property
    def filename(self) -> str:
        return self.path.name


class AssetStore(Protocol):
    def upload(self, data: bytes, content_type: str, filename: str | None = None) -> str:
        ...

    def upload_json(self, document: dict[str, Any]) -> str:
        ...

    def fetch(self, uri: str) -> bytes:
        ...


def read_asset(path: Path) -> LocalAsset:
    """Read a local asset, raising AssetUnavailable before any upload happens."""
    resolved = Path(path).expanduser()
    try:
        data = resolved.read_bytes()
    except FileNotFoundError as exc:
        raise AssetUnavailable(
            f"{resolved.name} not found. Place the image at {resolved} and run again.",
            step="read-asset",
            identity=str(resolved),
        ) from exc
    except IsADirectoryError as exc:
        raise AssetUnavailable(f"{resolved} is a directory, expected an image file.", step="read-asset", identity=str(resolved)) from exc
    except OSError as exc:
        raise AssetUnavailable(f"Unable to read {resolved}: {exc}", step="read-asset", identity=str(resolved)) from exc
    content_type = mimetypes.guess_type(str(resolved))[0] or "application/octet-stream"
    return LocalAsset(path=resolved, data=data, content_type=content_type)


def _encode_json(document: dict[str, Any]) -> bytes:
    return json.dumps(document, indent=2, sort_keys=False).encode("utf-8")


class HttpAssetStore:
    """Uploads through an HTTPS pinning endpoint that answers with a CID.

    Accepts the nft.storage (``value.cid``), Pinata (``IpfsHash``) and bare
    ``cid`` response shapes.
    """

    def __init__(
        self,
        endpoint: str,
        *,
        token: str | None = None,
        gateway_url: str | None = "https://ipfs.io/ipfs",
        timeout: float = 30.0,
        _post: Callable[..., httpx.Response] | None = None,
        _get: Callable[..., httpx.Response] | None = None,
    ) -> None:
        self.endpoint = endpoint
        self.token = token
        self.gateway_url = gateway_url.rstrip("/") if gateway_url else None
        self.timeout = timeout
        self._post = _post or httpx.post
        self._get = _get or httpx.get

    def upload(self, data: bytes, content_type: str, filename: str | None = None) -> str:
        name = filename or "asset"
        headers = {"Authorization": f"Bearer {self.token}"} if self.token else {}
        try:
            resp = self._post(
                self.endpoint,
                headers=headers,
                files={"file": (name, data, content_type)},
                timeout=self.timeout,
            )
            resp.raise_for_status()
            payload = resp.json()
        except httpx.HTTPError as exc:
            raise UploadFailed(f"Upload of {name} failed: {exc}", step="upload", identity=name) from exc
        except ValueError as exc:
            raise UploadFailed(f"Upload of {name} returned invalid JSON", step="upload", identity=name) from exc

        cid = self._extract_cid(payload)
        if not cid:
            raise UploadFailed(f"Upload response missing cid: {payload}", step="upload", identity=name)
        uri = self._format_uri(cid)
        logger.debug("Uploaded %s (%d bytes) to %s", name, len(data), uri)
        return uri

    def upload_json(self, document: dict[str, Any]) -> str:
        return self.upload(_encode_json(document), "application/json", "metadata.json")

    def fetch(self, uri: str) -> bytes:
        url = self._resolve(uri)
        try:
            resp = self._get(url, timeout=self.timeout, follow_redirects=True)
            resp.raise_for_status()
        except httpx.HTTPError as exc:
            raise UploadFailed(f"Unable to fetch {uri}: {exc}", step="fetch", identity=uri) from exc
        return resp.content

    @staticmethod
    def _extract_cid(payload: Any) -> str | None:
        if not isinstance(payload, dict):
            return None
        value = payload.get("value")
        if isinstance(value, dict) and value.get("cid"):
            return str(value["cid"])
        for key in ("IpfsHash", "cid"):
            if payload.get(key):
                return str(payload[key])
        return None

    def _format_uri(self, cid: str) -> str:
        if self.gateway_url:
            return f"{self.gateway_url}/{cid}"
        return f"ipfs://{cid}"

    def _resolve(self, uri: str) -> str:
        if uri.startswith("ipfs://"):
            gateway = self.gateway_url or "https://ipfs.io/ipfs"
            return f"{gateway}/{uri[len('ipfs://'):]}"
        return uri


class LocalAssetStore:
    """Writes uploads under a directory and returns file:// URIs.

    Every upload gets a fresh id, so identical bytes produce distinct URIs.
    """

    def __init__(self, root: Path) -> None:
        self.root = root.expanduser()
        self.root.mkdir(parents=True, exist_ok=True)

    def upload(self, data: bytes, content_type: str, filename: str | None = None) -> str:
        suffix = Path(filename).suffix if filename else ""
        if not suffix:
            suffix = mimetypes.guess_extension(content_type) or ""
        target = self.root / f"{uuid.uuid4().hex}{suffix}"
        try:
            target.write_bytes(data)
        except OSError as exc:
            raise UploadFailed(f"Unable to write {target}: {exc}", step="upload", identity=filename) from exc
        logger.debug("Stored %d bytes at %s", len(data), target)
        return target.resolve().as_uri()

    def upload_json(self, document: dict[str, Any]) -> str:
        return self.upload(_encode_json(document), "application/json", "metadata.json")

    def fetch(self, uri: str) -> bytes:
        parsed = urlparse(uri)
        if parsed.scheme != "file":
            raise UploadFailed(f"Local asset store cannot fetch {uri}", step="fetch", identity=uri)
        path = Path(url2pathname(parsed.path))
        try:
            return path.read_bytes()
        except OSError as exc:
            raise UploadFailed(f"Unable to fetch {uri}: {exc}", step="fetch", identity=uri) from exc


__all__ = [
    "AssetStore",
    "HttpAssetStore",
    "LocalAsset",
    "LocalAssetStore",
    "OffchainMetadata",
    "read_asset",
]
