"""Thumbnail URLs for an occurrence's images."""

from __future__ import annotations

import hashlib
from typing import Any

from gbif_explorer.datasources.gbif.client import GbifClient

MAX_IMAGES = 2
THUMBNAIL_SIZE = "200x"
MEDIA_TTL = 60 * 60  # seconds


def _is_image(item: dict[str, Any]) -> bool:
    return item.get("type") == "StillImage" or str(item.get("format") or "").startswith("image/")


def occurrence_image_urls(client: GbifClient, key: Any) -> list[str]:
    """
    Return up to two GBIF image-cache thumbnail URLs for an occurrence.

    Only API-sourced records (positive integer keys) have media; anything
    else raises ``ValueError`` before a request is made. The cache path
    uses the MD5 hex digest of each media identifier.
    """
    if isinstance(key, bool) or not isinstance(key, int) or key < 1:
        msg = f"Invalid occurrence key: {key!r}"
        raise ValueError(msg)

    data = client.get(
        f"occurrence/{key}",
        {},
        cache_prefix="occurrence-media",
        ttl=MEDIA_TTL,
        fallback_message="Occurrence not found",
    )
    media = [m for m in (data or {}).get("media") or [] if _is_image(m)]
    urls: list[str] = []
    for item in media[:MAX_IMAGES]:
        identifier = item.get("identifier")
        if not identifier:
            break
        digest = hashlib.md5(str(identifier).encode("utf-8")).hexdigest()  # noqa: S324
        urls.append(f"{client.base_url}/image/cache/{THUMBNAIL_SIZE}/occurrence/{key}/media/{digest}")
    return urls
