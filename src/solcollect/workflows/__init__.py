"""End-to-end NFT collection workflows."""

from .base import UploadedContent, WorkflowContext, WorkflowResult, explorer_link, rpc_endpoint, upload_content
from .collection import MintRequest, create_collection, mint_nft
from .update import UpdateRequest, update_nft
from .verify import verify_collection

__all__ = [
    "MintRequest",
    "UpdateRequest",
    "UploadedContent",
    "WorkflowContext",
    "WorkflowResult",
    "create_collection",
    "explorer_link",
    "mint_nft",
    "rpc_endpoint",
    "update_nft",
    "upload_content",
    "verify_collection",
]
