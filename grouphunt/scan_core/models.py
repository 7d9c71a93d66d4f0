"""Scan Core Models - Hits, proxy records and probe outcomes"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .constants import RESULT_LINE_LABEL, RESULT_LINE_UNIT


# ===============================================================================
# CORE ENUMERATIONS
# ===============================================================================

class ProxyState(Enum):
    """Connection state of a proxy as seen by the front end"""
    UNCONNECTED = "unconnected"
    CONNECTED = "connected"
    RATE_LIMITED = "rate_limited"


class WorkerState(Enum):
    """States of the per-proxy worker state machine"""
    IDLE = "idle"
    CONNECTING = "connecting"
    SCANNING = "scanning"
    RATE_LIMIT_COOLDOWN = "rate_limit_cooldown"
    DISCONNECTED = "disconnected"
    RETRYING = "retrying"
    STOPPED = "stopped"


class BalanceStatus(Enum):
    """Classification of a balance-check response"""
    FOUND = "found"
    EMPTY = "empty"
    RATE_LIMITED = "rate_limited"
    MALFORMED = "malformed"


class OwnershipStatus(Enum):
    """Classification of an ownership-check response"""
    ELIGIBLE = "eligible"
    INELIGIBLE = "ineligible"
    RATE_LIMITED = "rate_limited"
    MALFORMED = "malformed"


# ===============================================================================
# DATA CLASSES
# ===============================================================================

@dataclass(frozen=True)
class Hit:
    """A group that holds funds and can be claimed"""
    group_id: int
    balance: int
    name: Optional[str] = None

    def to_line(self) -> str:
        return format_result_line(self.group_id, self.balance)

    @property
    def display_name(self) -> str:
        return self.name if self.name is not None else "(unknown group name)"


@dataclass(frozen=True)
class BalanceOutcome:
    """Result of a balance check"""
    status: BalanceStatus
    balance: int = 0

    @classmethod
    def found(cls, balance: int) -> "BalanceOutcome":
        return cls(BalanceStatus.FOUND, balance)

    @classmethod
    def empty(cls) -> "BalanceOutcome":
        return cls(BalanceStatus.EMPTY)

    @classmethod
    def rate_limited(cls) -> "BalanceOutcome":
        return cls(BalanceStatus.RATE_LIMITED)

    @classmethod
    def malformed(cls) -> "BalanceOutcome":
        return cls(BalanceStatus.MALFORMED)


@dataclass(frozen=True)
class OwnershipOutcome:
    """Result of an ownership check"""
    status: OwnershipStatus
    name: Optional[str] = None

    @classmethod
    def eligible(cls, name: Optional[str] = None) -> "OwnershipOutcome":
        return cls(OwnershipStatus.ELIGIBLE, name)

    @classmethod
    def ineligible(cls) -> "OwnershipOutcome":
        return cls(OwnershipStatus.INELIGIBLE)

    @classmethod
    def rate_limited(cls) -> "OwnershipOutcome":
        return cls(OwnershipStatus.RATE_LIMITED)

    @classmethod
    def malformed(cls) -> "OwnershipOutcome":
        return cls(OwnershipStatus.MALFORMED)


@dataclass
class ProxyRecord:
    """One configured proxy and its live connection state.

    Mutated only by the worker bound to it.
    """
    index: int
    endpoint: str
    state: ProxyState = ProxyState.UNCONNECTED

    # Candidates checked on the current connection
    connection_checked: int = 0
    # Candidates checked since the current reconnect cycle began
    cycle_checked: int = 0
    total_checked: int = 0

    def count_checked(self):
        self.connection_checked += 1
        self.cycle_checked += 1
        self.total_checked += 1

    @property
    def is_connected(self) -> bool:
        return self.state != ProxyState.UNCONNECTED

    def __str__(self) -> str:
        return f"Proxy {self.index} ({self.endpoint})"


# ===============================================================================
# RESULT LINE HELPERS
# ===============================================================================

def format_result_line(group_id: int, balance: int) -> str:
    """Render one result-store line"""
    return f"{RESULT_LINE_LABEL} {group_id} has {balance} {RESULT_LINE_UNIT}."
