"""
Collection Metadata - Per-item metadata documents.

Builds the JSON documents that go into the metadata folder uploaded to a
pinning service. Each file is named after the item id, so a token's locator
is simply base_uri + id.

Also renders the same documents as a CIP-25 (label 721) metadata map for
Cardano mint transactions.
"""
import json
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

import structlog

from collection_config import CIP25_MAX_STRING_BYTES, CIP25_METADATA_LABEL, FIRST_ITEM_ID

logger = structlog.get_logger(__name__)


def item_metadata(
    name: str,
    description: str,
    image_base_uri: str,
    item_id: int,
    attributes: Optional[List[Dict[str, Any]]] = None,
) -> Dict[str, Any]:
    """ERC-721 style metadata for one item; the image is <image_base_uri><id>.png."""
    return {
        "name": f"{name} #{item_id}",
        "description": description,
        "image": f"{image_base_uri}{item_id}.png",
        "edition": item_id,
        "attributes": list(attributes or []),
    }


def collection_metadata(
    name: str,
    description: str,
    image_base_uri: str,
    count: int,
    attributes: Optional[Dict[int, List[Dict[str, Any]]]] = None,
) -> List[Dict[str, Any]]:
    """Metadata for items FIRST_ITEM_ID .. FIRST_ITEM_ID + count - 1."""
    attributes = attributes or {}
    return [
        item_metadata(name, description, image_base_uri, item_id, attributes.get(item_id))
        for item_id in range(FIRST_ITEM_ID, FIRST_ITEM_ID + count)
    ]


def write_metadata_folder(folder, documents: Iterable[Dict[str, Any]]) -> List[Path]:
    """
    Write one JSON file per item, named by its edition number (no extension).
    Returns the written paths.
    """
    folder = Path(folder)
    folder.mkdir(parents=True, exist_ok=True)
    written = []
    for doc in documents:
        path = folder / str(doc["edition"])
        path.write_text(json.dumps(doc, indent=2), encoding="utf-8")
        written.append(path)
    logger.info("metadata_written", folder=str(folder), files=len(written))
    return written


def chunk_metadata_string(value: str, limit: int = CIP25_MAX_STRING_BYTES):
    """
    Transaction metadata strings are capped at `limit` UTF-8 bytes.
    Longer values become a list of chunks, never splitting a character.
    """
    if len(value.encode("utf-8")) <= limit:
        return value
    chunks = []
    current = ""
    size = 0
    for ch in value:
        n = len(ch.encode("utf-8"))
        if size + n > limit:
            chunks.append(current)
            current, size = "", 0
        current += ch
        size += n
    if current:
        chunks.append(current)
    return chunks


def cip25_metadata(policy_id_hex: str, token_prefix: str, documents: Iterable[Dict[str, Any]]) -> Dict[int, Any]:
    """
    CIP-25 transaction metadata: {721: {policy_id: {asset_name: doc}}}.
    Asset names follow collection_validator.item_token_name.
    """
    assets = {}
    for doc in documents:
        assets[f"{token_prefix}{doc['edition']}"] = {
            "name": chunk_metadata_string(doc["name"]),
            "image": chunk_metadata_string(doc["image"]),
            "description": chunk_metadata_string(doc["description"]),
            "attributes": doc["attributes"],
        }
    return {CIP25_METADATA_LABEL: {policy_id_hex: assets, "version": "1.0"}}


def metadata_from_settings(count: int, settings=None) -> List[Dict[str, Any]]:
    """collection_metadata() driven by the collection settings."""
    if settings is None:
        from collection_settings import settings
    return collection_metadata(
        settings.COLLECTION_NAME,
        settings.COLLECTION_DESCRIPTION,
        settings.IMAGE_BASE_URI,
        count,
    )
