"""
Scan Engine - One worker per proxy, one event stream for the front end

The engine owns the live configuration channel, spawns a ProxyWorker task
for every proxy URI, fans their events into a single EventChannel and
tears every worker down on stop. A worker dying, for whatever reason, is
logged and never stops the engine.
"""

import asyncio
import logging
import random
from functools import partial
from typing import AsyncIterator, List, Optional

from ..scan_core.config import WorkerSettings
from ..scan_core.constants import MAX_GROUP_ID, DEFAULT_STOP_GRACE
from ..scan_core.live_config import LiveConfigChannel
from ..scan_core.models import ProxyRecord
from ..scan_core.result_store import ResultStore
from .candidates import CandidateGenerator
from .events import EventChannel, ScanEvent
from .probe_client import RemoteProbeClient
from .worker import ClientFactory, ProxyWorker, Sleep

logger = logging.getLogger(__name__)


def default_client_factory(api_key: Optional[str] = None, **client_options) -> ClientFactory:
    """Factory building a RemoteProbeClient per proxy endpoint"""
    return partial(RemoteProbeClient, api_key=api_key, **client_options)


class ScanEngine:
    """Runs the proxy pool and exposes its event stream"""

    def __init__(self, proxies: List[str], live_config: LiveConfigChannel,
                 result_store: ResultStore, client_factory: Optional[ClientFactory] = None,
                 settings: Optional[WorkerSettings] = None, max_group_id: int = MAX_GROUP_ID,
                 rng: Optional[random.Random] = None, sleep: Sleep = asyncio.sleep):
        self.proxies = list(proxies)
        self.live_config = live_config
        self.result_store = result_store
        self.client_factory = client_factory or default_client_factory()
        self.settings = settings or WorkerSettings()
        self.candidates = CandidateGenerator(max_group_id, rng)
        self.sleep = sleep

        self.records: List[ProxyRecord] = []
        self.workers: List[ProxyWorker] = []
        self._tasks: List[asyncio.Task] = []
        self._events: Optional[EventChannel] = None
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    # ===========================================================================
    # LIFECYCLE
    # ===========================================================================

    @property
    def is_running(self) -> bool:
        return any(not task.done() for task in self._tasks)

    @property
    def active_workers(self) -> int:
        return sum(1 for task in self._tasks if not task.done())

    def start(self) -> EventChannel:
        """Open a new run generation and spawn one worker per proxy"""
        if self.is_running:
            raise RuntimeError("Scan engine is already running")

        self.live_config.set_running(True)
        self._events = EventChannel()
        self.records = []
        self.workers = []
        self._tasks = []

        for index, endpoint in enumerate(self.proxies):
            record = ProxyRecord(index=index, endpoint=endpoint)
            worker = ProxyWorker(
                record=record,
                live_config=self.live_config.subscribe(),
                result_store=self.result_store,
                events=self._events,
                candidates=self.candidates,
                client_factory=self.client_factory,
                settings=self.settings,
                sleep=self.sleep,
            )
            task = asyncio.create_task(worker.run(), name=f"proxy-worker-{index}")
            task.add_done_callback(partial(self._worker_done, record))
            self.records.append(record)
            self.workers.append(worker)
            self._tasks.append(task)

        self.logger.info(f"Started {len(self._tasks)} proxy workers")
        return self._events

    def _worker_done(self, record: ProxyRecord, task: asyncio.Task):
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            self.logger.error(f"{record} worker crashed: {error!r}", exc_info=error)

    async def stop(self, grace: float = DEFAULT_STOP_GRACE):
        """Ask every worker to stop, cancel stragglers after ``grace`` seconds"""
        self.live_config.set_running(False)
        pending = [task for task in self._tasks if not task.done()]
        if pending:
            _, still_running = await asyncio.wait(pending, timeout=grace)
            for task in still_running:
                task.cancel()
            if still_running:
                self.logger.info(f"Cancelled {len(still_running)} workers still busy after {grace}s")
                await asyncio.gather(*still_running, return_exceptions=True)
        if self._events is not None:
            self._events.close()
        self.logger.info("Scan engine stopped")

    async def wait(self):
        """Wait until every worker has exited on its own"""
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)

    # ===========================================================================
    # EVENT STREAM
    # ===========================================================================

    async def events(self, poll_interval: float = 0.5) -> AsyncIterator[ScanEvent]:
        """Yield events until every worker has exited and the queue is drained"""
        if self._events is None:
            return
        channel = self._events
        while True:
            if not channel.empty():
                yield channel.get_nowait()
                continue
            if not self.is_running:
                return
            try:
                yield await asyncio.wait_for(channel.get(), timeout=poll_interval)
            except asyncio.TimeoutError:
                continue

    def drain(self) -> List[ScanEvent]:
        """Return every event currently queued"""
        drained = []
        if self._events is not None:
            while not self._events.empty():
                drained.append(self._events.get_nowait())
        return drained

    def __repr__(self) -> str:
        return f"ScanEngine(proxies={len(self.proxies)}, active_workers={self.active_workers})"


def build_engine(config, proxies: List[str], api_key: Optional[str] = None,
                 client_factory: Optional[ClientFactory] = None) -> ScanEngine:
    """Create an engine from a ScanConfig"""
    live_config = LiveConfigChannel(
        minimum_balance_threshold=config.minimum_robux,
        accept_restricted_targets=config.accept_premium_groups,
    )
    factory = client_factory or default_client_factory(
        api_key=api_key, timeout=config.request_timeout, user_agent=config.user_agent)
    return ScanEngine(
        proxies=proxies,
        live_config=live_config,
        result_store=ResultStore(config.results_file),
        client_factory=factory,
        settings=config.worker_settings(),
        max_group_id=config.max_group_id,
    )
