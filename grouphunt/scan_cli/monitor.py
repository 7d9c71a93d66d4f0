"""Scan Monitor - Live console view of the engine's event stream"""

import logging
import time
from typing import Dict, List, Optional, Tuple

from rich.console import Console, Group
from rich.live import Live
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ..scan_core.constants import PREMIUM_TIERS, SECONDS_IN_MONTH, MONITOR_REFRESH_SECONDS
from ..scan_core.models import Hit, ProxyState
from ..scan_engine.engine import ScanEngine
from ..scan_engine.events import EventType, ScanEvent

logger = logging.getLogger(__name__)

STATE_STYLES = {
    ProxyState.CONNECTED: "green",
    ProxyState.RATE_LIMITED: "yellow",
    ProxyState.UNCONNECTED: "red",
}


# ===============================================================================
# MONITORING DATA
# ===============================================================================

def premium_robux_per_second(robux_per_month: int) -> float:
    return robux_per_month / SECONDS_IN_MONTH


def compare_to_premium(robux_per_second: float) -> Tuple[int, str]:
    """Percentage by which the find rate beats the closest premium tier.

    The closest tier is the most expensive one the rate already exceeds,
    or the cheapest tier when it exceeds none.
    """
    robux_per_month, price = PREMIUM_TIERS[0]
    for tier_robux, tier_price in PREMIUM_TIERS:
        if robux_per_second > premium_robux_per_second(tier_robux):
            robux_per_month, price = tier_robux, tier_price
    ratio = robux_per_second / premium_robux_per_second(robux_per_month)
    return int((ratio - 1.0) * 100), price


class MonitoringStats:
    """Front-end state rebuilt from scan events"""

    def __init__(self, proxies: List[str], start_time: Optional[float] = None):
        self.proxies = list(proxies)
        self.start_time = start_time if start_time is not None else time.monotonic()
        self.proxy_states: Dict[int, ProxyState] = {}
        self.hits: Dict[int, Hit] = {}
        self.groups_checked = 0

    def apply(self, event: ScanEvent):
        if event.type is EventType.PROXY_CONNECTED:
            self.proxy_states[event.proxy_index] = ProxyState.CONNECTED
        elif event.type is EventType.PROXY_RATE_LIMITED:
            self.proxy_states[event.proxy_index] = ProxyState.RATE_LIMITED
        elif event.type is EventType.PROXY_DISCONNECTED:
            self.proxy_states[event.proxy_index] = ProxyState.UNCONNECTED
        elif event.type is EventType.HIT_FOUND:
            # The first sighting of a group is the one shown
            self.hits.setdefault(event.hit.group_id, event.hit)
        elif event.type is EventType.CANDIDATE_CHECKED:
            self.groups_checked += 1

    @property
    def proxies_connected(self) -> int:
        return sum(1 for state in self.proxy_states.values() if state is not ProxyState.UNCONNECTED)

    @property
    def connected_percent(self) -> int:
        if not self.proxies:
            return 0
        return int(self.proxies_connected / len(self.proxies) * 100)

    @property
    def robux_found(self) -> int:
        return sum(hit.balance for hit in self.hits.values())

    def sorted_hits(self) -> List[Hit]:
        return sorted(self.hits.values(), key=lambda hit: (-hit.balance, hit.group_id))

    def robux_per_second(self, now: Optional[float] = None) -> float:
        elapsed = (now if now is not None else time.monotonic()) - self.start_time
        if elapsed <= 0:
            return 0.0
        return self.robux_found / elapsed


# ===============================================================================
# RICH RENDERING
# ===============================================================================

class ScanMonitor:
    """Consumes the engine's events and renders them with Rich"""

    def __init__(self, proxies: List[str], console: Optional[Console] = None,
                 refresh_seconds: float = MONITOR_REFRESH_SECONDS, max_rows: int = 15):
        self.stats = MonitoringStats(proxies)
        self.console = console or Console()
        self.refresh_seconds = refresh_seconds
        self.max_rows = max_rows

    def render_summary(self) -> Panel:
        better, price = compare_to_premium(self.stats.robux_per_second())
        text = Text()
        text.append(f"{self.stats.proxies_connected} proxies connected ", style="bold cyan")
        text.append(f"({self.stats.connected_percent}%)\n", style="dim")
        text.append(f"Total robux found: {self.stats.robux_found}\n", style="bold white")
        text.append(f"{self.stats.groups_checked} groups checked\n")
        text.append(f"{better}% better than {price} premium", style="magenta")
        return Panel(text, title="GroupHunt", style="blue")

    def render_proxies(self) -> Table:
        table = Table(title="Proxies", show_header=True, header_style="bold magenta")
        table.add_column("#", justify="right")
        table.add_column("Endpoint", style="cyan")
        table.add_column("State")
        for index, endpoint in enumerate(self.stats.proxies[:self.max_rows]):
            state = self.stats.proxy_states.get(index, ProxyState.UNCONNECTED)
            table.add_row(str(index), endpoint, Text(state.value, style=STATE_STYLES[state]))
        hidden = len(self.stats.proxies) - self.max_rows
        if hidden > 0:
            table.caption = f"... and {hidden} more"
        return table

    def render_hits(self) -> Table:
        return hits_table(self.stats.sorted_hits()[:self.max_rows],
                          title=f"Groups found ({len(self.stats.hits)})")

    def render(self) -> Group:
        return Group(self.render_summary(), self.render_proxies(), self.render_hits())

    async def consume(self, engine: ScanEngine):
        """Apply every event from ``engine`` until its workers are gone"""
        last_refresh = 0.0
        with Live(self.render(), console=self.console, auto_refresh=False) as live:
            async for event in engine.events(poll_interval=self.refresh_seconds):
                self.stats.apply(event)
                if event.type is EventType.HIT_FOUND:
                    logger.debug(event.hit.to_line())
                now = time.monotonic()
                if now - last_refresh >= self.refresh_seconds:
                    live.update(self.render(), refresh=True)
                    last_refresh = now
            live.update(self.render(), refresh=True)


def hits_table(hits: List[Hit], title: str = "Groups found") -> Table:
    table = Table(title=title, show_header=True, header_style="bold magenta")
    table.add_column("Group", justify="right", style="cyan")
    table.add_column("Name")
    table.add_column("Robux", justify="right", style="green")
    for hit in hits:
        table.add_row(str(hit.group_id), hit.display_name, str(hit.balance))
    return table
