# backend/moltly/services/storage/fetch.py
from typing import Optional, Tuple
import logging

import httpx

logger = logging.getLogger(__name__)

FETCH_TIMEOUT = httpx.Timeout(15.0, connect=5.0)


def http_client() -> httpx.Client:
    return httpx.Client(timeout=FETCH_TIMEOUT, follow_redirects=True)


def get_http_client():
    # FastAPI dependency; tests override it with a MockTransport client
    with http_client() as client:
        yield client


def fetch_remote(client: httpx.Client, url: str) -> Optional[Tuple[bytes, Optional[str]]]:
    """(body, content-type) for a remote http(s) URL, None on any failure."""
    if not url.startswith(("http://", "https://")):
        return None
    try:
        res = client.get(url)
    except httpx.HTTPError as exc:
        logger.debug("fetch %s failed: %s", url, exc)
        return None
    if res.status_code != 200:
        logger.debug("fetch %s returned %s", url, res.status_code)
        return None
    return res.content, res.headers.get("content-type")
