"""Proxy list loading and generation"""

import json
import logging
from typing import List

import requests

from .constants import PROXIES_FILE, PROXY_LIST_SOURCE_URL, PROXY_LIST_FETCH_TIMEOUT, DEFAULT_USER_AGENT
from .exceptions import (
    ProxyListError, ProxyListNotFoundError, ProxyListReadError, ProxyListFormatError
)

logger = logging.getLogger(__name__)


def load_proxy_list(path: str = PROXIES_FILE) -> List[str]:
    """Load a JSON array of proxy URIs.

    Raises ProxyListNotFoundError when the file does not exist,
    ProxyListReadError for any other I/O failure and ProxyListFormatError
    when the content is not a JSON array of strings.
    """
    try:
        with open(path, 'rb') as f:
            raw = f.read()
    except FileNotFoundError as e:
        raise ProxyListNotFoundError(f"Proxy list {path} not found", path) from e
    except OSError as e:
        raise ProxyListReadError(f"Loading {path} failed: {e}", path) from e

    try:
        proxies = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ProxyListFormatError(f"Loading {path} failed: invalid JSON ({e})", path) from e

    if not isinstance(proxies, list) or not all(isinstance(p, str) for p in proxies):
        raise ProxyListFormatError(f"Loading {path} failed: expected a JSON array of strings", path)

    logger.debug(f"Loaded {len(proxies)} proxies from {path}")
    return proxies


def parse_proxy_source(text: str, scheme: str = "socks5") -> List[str]:
    """Turn a plain host:port listing into proxy URIs"""
    return [f"{scheme}://{line.strip()}" for line in text.strip().splitlines() if line.strip()]


def generate_proxy_list(path: str = PROXIES_FILE, url: str = PROXY_LIST_SOURCE_URL,
                        timeout: float = PROXY_LIST_FETCH_TIMEOUT) -> List[str]:
    """Download a fresh SOCKS5 proxy list and save it as JSON.

    A failed save is only logged; the downloaded list is still returned.
    """
    try:
        response = requests.get(url, timeout=timeout, headers={'User-Agent': DEFAULT_USER_AGENT})
        response.raise_for_status()
    except requests.exceptions.RequestException as e:
        raise ProxyListError(f"Could not download proxy list: {e}", path) from e

    proxies = parse_proxy_source(response.text)
    logger.info(f"Downloaded {len(proxies)} proxies from {url}")

    try:
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(proxies, f)
    except OSError as e:
        logger.warning(f"Could not save proxy list to {path}: {e}")

    return proxies
