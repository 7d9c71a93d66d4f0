"""
Proxy Worker - Per-proxy scan / retry / reconnect state machine

One worker is bound to one proxy for its lifetime. It runs a flat state
machine::

    IDLE -> CONNECTING -> SCANNING -> RATE_LIMIT_COOLDOWN -> SCANNING
                              |
                              v
                        DISCONNECTED -> RETRYING -> CONNECTING | STOPPED

Each handler performs one step and returns the next state. The live
``running`` flag is polled before every new candidate and before every
retry decision; an in-flight request is never interrupted by it.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Optional

from ..scan_core.config import WorkerSettings
from ..scan_core.exceptions import ProxyConfigError, ConnectError, OtherHttpError, PersistenceError
from ..scan_core.live_config import LiveConfigView
from ..scan_core.models import (
    Hit, ProxyRecord, ProxyState, WorkerState, BalanceStatus, OwnershipStatus
)
from ..scan_core.result_store import ResultStore
from .candidates import CandidateGenerator
from .events import EventChannel, ScanEvent

logger = logging.getLogger(__name__)

# Builds a probe client for a proxy endpoint; may raise ProxyConfigError
ClientFactory = Callable[[str], Any]
Sleep = Callable[[float], Awaitable[None]]


class ProxyWorker:
    """Scans random candidates through a single proxy"""

    def __init__(self, record: ProxyRecord, live_config: LiveConfigView,
                 result_store: ResultStore, events: EventChannel,
                 candidates: CandidateGenerator, client_factory: ClientFactory,
                 settings: Optional[WorkerSettings] = None,
                 sleep: Sleep = asyncio.sleep):
        self.record = record
        self.live_config = live_config
        self.result_store = result_store
        self.events = events
        self.candidates = candidates
        self.client_factory = client_factory
        self.settings = settings or WorkerSettings()
        self.sleep = sleep

        self.state = WorkerState.IDLE
        self.client = None
        self.attempts = 0
        self.cycle = 0
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

        self._handlers: Dict[WorkerState, Callable[[], Awaitable[WorkerState]]] = {
            WorkerState.IDLE: self._spawn,
            WorkerState.CONNECTING: self._connect,
            WorkerState.SCANNING: self._scan_step,
            WorkerState.RATE_LIMIT_COOLDOWN: self._cool_down,
            WorkerState.DISCONNECTED: self._disconnect,
            WorkerState.RETRYING: self._retry,
        }

    @property
    def index(self) -> int:
        return self.record.index

    async def run(self):
        """Run the state machine until the worker stops"""
        try:
            while self.state is not WorkerState.STOPPED:
                self.state = await self._handlers[self.state]()
        except asyncio.CancelledError:
            self.logger.debug(f"Proxy {self.index} worker cancelled")
            raise
        finally:
            await self._close_client()
            self._set_proxy_state(ProxyState.UNCONNECTED)
            self.state = WorkerState.STOPPED
        self.logger.debug(f"Proxy {self.index} worker stopped")

    # ===========================================================================
    # STATE HANDLERS
    # ===========================================================================

    async def _spawn(self) -> WorkerState:
        self._begin_cycle()
        return WorkerState.CONNECTING

    async def _connect(self) -> WorkerState:
        if not self.live_config.running:
            self.logger.info(f"Disconnecting from proxy {self.index}")
            return WorkerState.STOPPED
        try:
            self.client = self.client_factory(self.record.endpoint)
        except ProxyConfigError as e:
            self.logger.error(f"Proxy {self.index} has an invalid configuration: {e}")
            return WorkerState.STOPPED

        self.record.connection_checked = 0
        self._set_proxy_state(ProxyState.CONNECTED)
        return WorkerState.SCANNING

    async def _scan_step(self) -> WorkerState:
        if not self.live_config.running:
            self.logger.info(f"Disconnecting from proxy {self.index}")
            self._set_proxy_state(ProxyState.UNCONNECTED)
            return WorkerState.STOPPED

        group_id = self.candidates.next()
        try:
            balance = await self.client.check_balance(group_id)
            if balance.status is BalanceStatus.RATE_LIMITED:
                return WorkerState.RATE_LIMIT_COOLDOWN

            if (balance.status is BalanceStatus.FOUND
                    and balance.balance >= self.live_config.minimum_balance_threshold):
                ownership = await self.client.check_ownership(
                    group_id, self.live_config.accept_restricted_targets)
                if ownership.status is OwnershipStatus.RATE_LIMITED:
                    return WorkerState.RATE_LIMIT_COOLDOWN
                if ownership.status is OwnershipStatus.ELIGIBLE:
                    await self._found(Hit(group_id, balance.balance, ownership.name))
        except ConnectError as e:
            self.logger.debug(f"Proxy {self.index} connect error: {e}")
            return WorkerState.DISCONNECTED
        except OtherHttpError as e:
            self.logger.error(f"Proxy {self.index} error in connection attempt {self.attempts}: {e}")
            return WorkerState.DISCONNECTED

        self.record.count_checked()
        self.events.send(ScanEvent.candidate_checked(self.index))
        return WorkerState.SCANNING

    async def _cool_down(self) -> WorkerState:
        cooldown = self.settings.cooldown_seconds
        self.logger.info(f"Proxy {self.index} is rate limited, waiting {cooldown:.0f} seconds")
        self._set_proxy_state(ProxyState.RATE_LIMITED)
        await self.sleep(cooldown)
        if not self.live_config.running:
            self.logger.info(f"Disconnecting from proxy {self.index}")
            self._set_proxy_state(ProxyState.UNCONNECTED)
            return WorkerState.STOPPED
        self._set_proxy_state(ProxyState.CONNECTED)
        return WorkerState.SCANNING

    async def _disconnect(self) -> WorkerState:
        await self._close_client()
        self._set_proxy_state(ProxyState.UNCONNECTED)
        self.attempts += 1
        return WorkerState.RETRYING

    async def _retry(self) -> WorkerState:
        if not self.live_config.running:
            self.logger.info(f"Disconnecting from proxy {self.index}")
            return WorkerState.STOPPED
        if self.attempts < self.settings.max_connection_attempts:
            return WorkerState.CONNECTING

        checked = self.record.cycle_checked
        if checked < self.settings.reconnect_threshold:
            self.logger.warning(
                f"Proxy {self.index} disconnected after {self.attempts} attempts "
                f"and {checked} groups checked; giving up")
            return WorkerState.STOPPED

        self.logger.info(
            f"Proxy {self.index} disconnected, but it has scanned {checked} groups. "
            f"Attempting to reconnect")
        self._begin_cycle()
        return WorkerState.CONNECTING

    # ===========================================================================
    # HELPERS
    # ===========================================================================

    def _begin_cycle(self):
        """Reset the attempt budget and the productivity counter"""
        self.cycle += 1
        self.attempts = 0
        self.record.cycle_checked = 0

    async def _found(self, hit: Hit):
        self.logger.info(hit.to_line())
        self.events.send(ScanEvent.hit_found(self.index, hit))
        try:
            await self.result_store.record(hit.group_id, hit.balance)
        except PersistenceError as e:
            self.logger.error(f"Error writing file: {e}")

    def _set_proxy_state(self, state: ProxyState):
        """Update the proxy record and emit the matching event on change"""
        if self.record.state is state:
            return
        self.record.state = state
        if state is ProxyState.CONNECTED:
            self.events.send(ScanEvent.proxy_connected(self.index))
        elif state is ProxyState.RATE_LIMITED:
            self.events.send(ScanEvent.proxy_rate_limited(self.index))
        else:
            self.events.send(ScanEvent.proxy_disconnected(self.index))

    async def _close_client(self):
        client, self.client = self.client, None
        if client is not None:
            await client.close()

    def __repr__(self) -> str:
        return f"ProxyWorker(index={self.index}, state={self.state.value})"
