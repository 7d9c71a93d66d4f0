"""Live Configuration Channel

Broadcasts the run flag, the minimum robux threshold and the premium-group
toggle to every active worker without restarting them. Readers always see
the latest value; there is no history and no cross-field ordering.

Each call to ``set_running(True)`` opens a fresh run generation. Views taken
from an earlier generation stay bound to it and can never observe the new
``True``, so workers left over from a previous run wind down on their own.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from .constants import DEFAULT_MINIMUM_ROBUX

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LiveConfigSnapshot:
    """Point-in-time copy of the live configuration"""
    running: bool = False
    minimum_balance_threshold: int = DEFAULT_MINIMUM_ROBUX
    accept_restricted_targets: bool = False


class _RunGeneration:
    """Run flag of one start/stop cycle"""

    __slots__ = ("number", "running")

    def __init__(self, number: int, running: bool):
        self.number = number
        self.running = running


class LiveConfigView:
    """Read-only subscription handed to a worker"""

    def __init__(self, channel: "LiveConfigChannel", generation: _RunGeneration):
        self._channel = channel
        self._generation = generation

    @property
    def running(self) -> bool:
        return self._generation.running

    @property
    def generation(self) -> int:
        return self._generation.number

    @property
    def minimum_balance_threshold(self) -> int:
        return self._channel.minimum_balance_threshold

    @property
    def accept_restricted_targets(self) -> bool:
        return self._channel.accept_restricted_targets

    def snapshot(self) -> LiveConfigSnapshot:
        return LiveConfigSnapshot(
            running=self.running,
            minimum_balance_threshold=self.minimum_balance_threshold,
            accept_restricted_targets=self.accept_restricted_targets,
        )

    def __repr__(self) -> str:
        return f"LiveConfigView(generation={self.generation}, running={self.running})"


class LiveConfigChannel:
    """Single-writer, multi-reader broadcast of the live configuration"""

    def __init__(self, minimum_balance_threshold: int = DEFAULT_MINIMUM_ROBUX,
                 accept_restricted_targets: bool = False):
        self._generation = _RunGeneration(0, False)
        self._minimum_balance_threshold = DEFAULT_MINIMUM_ROBUX
        self._accept_restricted_targets = bool(accept_restricted_targets)
        self.set_minimum_balance_threshold(minimum_balance_threshold)

    # Readers -------------------------------------------------------------

    @property
    def running(self) -> bool:
        return self._generation.running

    @property
    def minimum_balance_threshold(self) -> int:
        return self._minimum_balance_threshold

    @property
    def accept_restricted_targets(self) -> bool:
        return self._accept_restricted_targets

    def subscribe(self) -> LiveConfigView:
        """Return a view bound to the current run generation"""
        return LiveConfigView(self, self._generation)

    def snapshot(self) -> LiveConfigSnapshot:
        return self.subscribe().snapshot()

    # Writers -------------------------------------------------------------

    def set_running(self, running: bool):
        """Start or stop the current run.

        Starting always opens a new generation after forcing the previous
        one to stop.
        """
        self._generation.running = False
        if running:
            self._generation = _RunGeneration(self._generation.number + 1, True)
            logger.debug(f"Run generation {self._generation.number} started")
        else:
            logger.debug(f"Run generation {self._generation.number} stopped")

    def set_minimum_balance_threshold(self, value: Optional[int]):
        """Set the minimum robux a group needs before the ownership check.

        ``None`` restores the default.
        """
        if value is None:
            value = DEFAULT_MINIMUM_ROBUX
        value = int(value)
        if value < 0:
            raise ValueError("minimum_balance_threshold cannot be negative")
        self._minimum_balance_threshold = value

    def set_accept_restricted_targets(self, accept: bool):
        self._accept_restricted_targets = bool(accept)

    def __repr__(self) -> str:
        return (f"LiveConfigChannel(generation={self._generation.number}, "
                f"running={self.running}, "
                f"minimum_balance_threshold={self._minimum_balance_threshold}, "
                f"accept_restricted_targets={self._accept_restricted_targets})")
