from .models import (
    Hit, ProxyRecord, ProxyState, WorkerState,
    BalanceStatus, BalanceOutcome, OwnershipStatus, OwnershipOutcome
)
from .exceptions import (
    GroupHuntError, ConfigurationError, ProxyConfigError, ProbeError,
    ConnectError, OtherHttpError, RateLimitError, TransientProtocolError,
    PersistenceError, ProxyListError, ProxyListNotFoundError,
    ProxyListReadError, ProxyListFormatError
)
from .config import ConfigManager, ScanConfig, WorkerSettings
from .live_config import LiveConfigChannel, LiveConfigView, LiveConfigSnapshot
from .result_store import ResultStore
from .proxy_list import load_proxy_list, generate_proxy_list

__all__ = [
    "Hit", "ProxyRecord", "ProxyState", "WorkerState",
    "BalanceStatus", "BalanceOutcome", "OwnershipStatus", "OwnershipOutcome",
    "GroupHuntError", "ConfigurationError", "ProxyConfigError", "ProbeError",
    "ConnectError", "OtherHttpError", "RateLimitError", "TransientProtocolError",
    "PersistenceError", "ProxyListError", "ProxyListNotFoundError",
    "ProxyListReadError", "ProxyListFormatError",
    "ConfigManager", "ScanConfig", "WorkerSettings",
    "LiveConfigChannel", "LiveConfigView", "LiveConfigSnapshot",
    "ResultStore", "load_proxy_list", "generate_proxy_list"
]
