"""
GroupHunt Custom Exceptions
Standardized exception hierarchy for the scanner core, engine and CLI
"""


class GroupHuntError(Exception):
    """Base exception for all GroupHunt errors"""
    pass


class ConfigurationError(GroupHuntError):
    """Configuration-related errors"""
    pass


class ProxyConfigError(ConfigurationError):
    """A proxy endpoint URI that cannot be turned into a client"""

    def __init__(self, message: str, endpoint: str = None):
        super().__init__(message)
        self.endpoint = endpoint


# ===============================================================================
# PROBE ERRORS
# ===============================================================================

class ProbeError(GroupHuntError):
    """Errors raised while probing the remote API through a proxy"""
    pass


class ConnectError(ProbeError):
    """Proxy or network failure; drives the reconnect state machine"""
    pass


class OtherHttpError(ProbeError):
    """HTTP-level failure that is not a connect failure"""
    pass


class RateLimitError(ProbeError):
    """Remote API answered with the TooManyRequests envelope"""
    pass


class TransientProtocolError(ProbeError):
    """Malformed JSON or unexpected response shape"""
    pass


# ===============================================================================
# STORAGE ERRORS
# ===============================================================================

class PersistenceError(GroupHuntError):
    """Result store write failure"""
    pass


class ProxyListError(GroupHuntError):
    """Proxy list could not be loaded or generated"""

    def __init__(self, message: str, path: str = None):
        super().__init__(message)
        self.path = path


class ProxyListNotFoundError(ProxyListError):
    """Proxy list file does not exist (first run)"""
    pass


class ProxyListReadError(ProxyListError):
    """Proxy list file exists but could not be read"""
    pass


class ProxyListFormatError(ProxyListError):
    """Proxy list file is not a JSON array of strings"""
    pass
