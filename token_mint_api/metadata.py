import logging
from typing import Optional
from urllib.parse import urlparse

import requests

from .errors import InvalidUrl, MalformedMetadata, MetadataUnreachable
from .models import TokenMetadata

logger = logging.getLogger(__name__)


def is_valid_url(value) -> bool:
    """True for absolute http(s) URLs with a host."""
    if not isinstance(value, str) or not value:
        return False
    try:
        parsed = urlparse(value)
    except ValueError:
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


class MetadataFetcher:
    """Fetches and validates the off-chain JSON metadata document of a token."""

    def __init__(self, session: Optional[requests.Session] = None, timeout: float = 30.0):
        self.session = session or requests.Session()
        self.timeout = timeout

    def fetch(self, url: str) -> TokenMetadata:
        if not is_valid_url(url):
            raise InvalidUrl("Invalid URL format. URL must start with http:// or https://")

        logger.info(f"Fetching metadata from: {url}")
        try:
            r = self.session.get(url, timeout=self.timeout, headers={"Accept": "application/json"})
        except requests.RequestException as e:
            raise MetadataUnreachable(f"Failed to fetch metadata: {e}")

        if not r.ok:
            raise MetadataUnreachable(
                f"Failed to fetch metadata: {r.status_code} {r.reason}",
                status=r.status_code,
                reason=r.reason,
            )

        try:
            doc = r.json()
        except ValueError as e:
            raise MalformedMetadata(f"Invalid JSON in metadata response: {e}")

        metadata = TokenMetadata.from_dict(doc)
        logger.info(f"Metadata OK: {metadata.name} ({metadata.symbol})")
        return metadata
