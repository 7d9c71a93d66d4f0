"""
Remote Probe Client - Balance and ownership checks through one proxy

Wraps the two remote read operations behind a reusable aiohttp session
bound to a single outbound proxy (SOCKS4/SOCKS5/HTTP via aiohttp-socks)
and classifies every response into a probe outcome.

Rate-limit envelopes and malformed bodies are outcomes, not exceptions.
Network failures are raised as ConnectError (proxy or connection level)
or OtherHttpError (anything else aiohttp reports).
"""

import asyncio
import json
import logging
from typing import Any, Dict, Optional, Union
from urllib.parse import urlparse

import aiohttp
from aiohttp import ClientSession, ClientTimeout
from aiohttp_socks import ProxyConnector, ProxyType, ProxyError, ProxyConnectionError, ProxyTimeoutError

from ..scan_core.constants import (
    FUNDS_CHECK_URL, OWNER_CHECK_URL, RATE_LIMIT_MESSAGE,
    DEFAULT_REQUEST_TIMEOUT, DEFAULT_CONNECT_TIMEOUT, DEFAULT_USER_AGENT
)
from ..scan_core.exceptions import (
    ProxyConfigError, ConnectError, OtherHttpError, RateLimitError, TransientProtocolError
)
from ..scan_core.models import BalanceOutcome, OwnershipOutcome

logger = logging.getLogger(__name__)


# ===============================================================================
# CONSTANTS
# ===============================================================================

PROXY_SCHEMES = {
    # scheme: (proxy type, remote DNS, default port)
    'socks5': (ProxyType.SOCKS5, False, 1080),
    'socks5h': (ProxyType.SOCKS5, True, 1080),
    'socks4': (ProxyType.SOCKS4, False, 1080),
    'socks4a': (ProxyType.SOCKS4, True, 1080),
    'http': (ProxyType.HTTP, False, 80),
    'https': (ProxyType.HTTP, False, 443),
}

# Failures of the proxy or the connection itself
CONNECT_ERRORS = (
    aiohttp.ClientConnectorError,
    ProxyError,
    ProxyConnectionError,
    ProxyTimeoutError,
    asyncio.TimeoutError,
)


# ===============================================================================
# RESPONSE CLASSIFICATION
# ===============================================================================

def is_rate_limited(data: Any) -> bool:
    """True for the ``{"errors": [{"message": "TooManyRequests"}]}`` envelope"""
    try:
        return data["errors"][0]["message"] == RATE_LIMIT_MESSAGE
    except (KeyError, IndexError, TypeError):
        return False


def decode_body(body: Union[bytes, str]) -> Any:
    """Parse a response body, raising on rate limits and bad JSON"""
    try:
        data = json.loads(body)
    except ValueError as e:
        raise TransientProtocolError(f"Response is not valid JSON: {e}") from e
    if is_rate_limited(data):
        raise RateLimitError(RATE_LIMIT_MESSAGE)
    return data


def classify_balance(body: Union[bytes, str]) -> BalanceOutcome:
    """Classify a balance-check response body"""
    try:
        data = decode_body(body)
    except RateLimitError:
        return BalanceOutcome.rate_limited()
    except TransientProtocolError:
        return BalanceOutcome.malformed()

    robux = data.get("robux") if isinstance(data, dict) else None
    if not isinstance(robux, int) or isinstance(robux, bool) or robux < 0:
        return BalanceOutcome.malformed()
    if robux == 0:
        return BalanceOutcome.empty()
    return BalanceOutcome.found(robux)


def is_claimable(group: Dict[str, Any], accept_restricted: bool) -> bool:
    """Ownership predicate: unlocked, public, ownerless, premium only if accepted"""
    not_locked = not group.get("isLocked")
    public = group.get("publicEntryAllowed") is True
    no_owner = group.get("owner") is None
    premium = group.get("isBuildersClubOnly") is True
    return not_locked and public and no_owner and (not premium or accept_restricted)


def classify_ownership(body: Union[bytes, str], accept_restricted: bool) -> OwnershipOutcome:
    """Classify an ownership-check response body"""
    try:
        data = decode_body(body)
    except RateLimitError:
        return OwnershipOutcome.rate_limited()
    except TransientProtocolError:
        return OwnershipOutcome.malformed()

    if not isinstance(data, dict):
        return OwnershipOutcome.malformed()
    if not is_claimable(data, accept_restricted):
        return OwnershipOutcome.ineligible()
    name = data.get("name")
    return OwnershipOutcome.eligible(name if isinstance(name, str) else None)


# ===============================================================================
# PROXY CONNECTOR
# ===============================================================================

def create_proxy_connector(endpoint: str) -> ProxyConnector:
    """Build an aiohttp-socks connector for a proxy URI.

    A missing port falls back to the scheme's default (1080 for SOCKS).
    """
    try:
        parsed = urlparse(endpoint)
        port = parsed.port
    except ValueError as e:
        raise ProxyConfigError(f"Malformed proxy URI {endpoint!r}: {e}", endpoint) from e

    scheme = (parsed.scheme or '').lower()
    if scheme not in PROXY_SCHEMES:
        raise ProxyConfigError(f"Unsupported proxy scheme in {endpoint!r}", endpoint)
    if not parsed.hostname:
        raise ProxyConfigError(f"Proxy URI {endpoint!r} has no host", endpoint)

    proxy_type, rdns, default_port = PROXY_SCHEMES[scheme]
    if port is None:
        port = default_port

    return ProxyConnector(
        proxy_type=proxy_type,
        host=parsed.hostname,
        port=port,
        username=parsed.username,
        password=parsed.password,
        rdns=rdns,
    )


# ===============================================================================
# REMOTE PROBE CLIENT
# ===============================================================================

class RemoteProbeClient:
    """Reusable HTTP client bound to one proxy endpoint"""

    def __init__(self, endpoint: str, api_key: Optional[str] = None,
                 timeout: float = DEFAULT_REQUEST_TIMEOUT,
                 user_agent: str = DEFAULT_USER_AGENT):
        self.endpoint = endpoint
        self.api_key = api_key
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

        connector = create_proxy_connector(endpoint)
        self._session = ClientSession(
            connector=connector,
            timeout=ClientTimeout(total=timeout, connect=min(timeout, DEFAULT_CONNECT_TIMEOUT)),
            headers={'User-Agent': user_agent, 'Accept': 'application/json'},
        )

    async def check_balance(self, group_id: int) -> BalanceOutcome:
        """Check the funds of a group"""
        body = await self._fetch(FUNDS_CHECK_URL.format(group_id=group_id))
        return classify_balance(body)

    async def check_ownership(self, group_id: int, accept_restricted: bool) -> OwnershipOutcome:
        """Check whether a group can be claimed"""
        body = await self._fetch(OWNER_CHECK_URL.format(group_id=group_id))
        return classify_ownership(body, accept_restricted)

    async def _fetch(self, url: str) -> bytes:
        params = {'_': self.api_key} if self.api_key else None
        try:
            async with self._session.get(url, params=params) as response:
                return await response.read()
        except CONNECT_ERRORS as e:
            raise ConnectError(f"{self.endpoint}: {e!r}") from e
        except aiohttp.ClientError as e:
            raise OtherHttpError(f"{self.endpoint}: {e!r}") from e

    async def close(self):
        if not self._session.closed:
            await self._session.close()

    def __repr__(self) -> str:
        return f"RemoteProbeClient(endpoint='{self.endpoint}')"
