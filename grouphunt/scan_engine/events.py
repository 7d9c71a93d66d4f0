"""Scan events and the multi-producer, single-consumer event channel"""

import asyncio
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..scan_core.models import Hit


class EventType(Enum):
    """Kinds of events emitted by workers"""
    PROXY_CONNECTED = "proxy_connected"
    PROXY_DISCONNECTED = "proxy_disconnected"
    PROXY_RATE_LIMITED = "proxy_rate_limited"
    HIT_FOUND = "hit_found"
    CANDIDATE_CHECKED = "candidate_checked"


@dataclass(frozen=True)
class ScanEvent:
    """One event from a worker"""
    type: EventType
    proxy_index: int
    hit: Optional[Hit] = None

    @classmethod
    def proxy_connected(cls, index: int) -> "ScanEvent":
        return cls(EventType.PROXY_CONNECTED, index)

    @classmethod
    def proxy_disconnected(cls, index: int) -> "ScanEvent":
        return cls(EventType.PROXY_DISCONNECTED, index)

    @classmethod
    def proxy_rate_limited(cls, index: int) -> "ScanEvent":
        return cls(EventType.PROXY_RATE_LIMITED, index)

    @classmethod
    def hit_found(cls, index: int, hit: Hit) -> "ScanEvent":
        return cls(EventType.HIT_FOUND, index, hit)

    @classmethod
    def candidate_checked(cls, index: int) -> "ScanEvent":
        return cls(EventType.CANDIDATE_CHECKED, index)


class EventChannel:
    """Unbounded event queue; senders never block.

    ``send`` returns False once the channel is closed and the event is
    dropped. Callers are free to ignore the result.
    """

    def __init__(self):
        self._queue: "asyncio.Queue[ScanEvent]" = asyncio.Queue()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def send(self, event: ScanEvent) -> bool:
        if self._closed:
            return False
        self._queue.put_nowait(event)
        return True

    def close(self):
        self._closed = True

    async def get(self) -> ScanEvent:
        return await self._queue.get()

    def get_nowait(self) -> ScanEvent:
        return self._queue.get_nowait()

    def empty(self) -> bool:
        return self._queue.empty()
