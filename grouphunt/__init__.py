__version__ = "1.0.0"

from .scan_core.models import Hit, ProxyRecord, ProxyState, WorkerState
from .scan_core.config import ConfigManager, ScanConfig, WorkerSettings
from .scan_core.live_config import LiveConfigChannel
from .scan_core.result_store import ResultStore
from .scan_core.proxy_list import load_proxy_list, generate_proxy_list
from .scan_engine.engine import ScanEngine, build_engine
from .scan_engine.events import EventType, ScanEvent

__all__ = [
    "Hit", "ProxyRecord", "ProxyState", "WorkerState",
    "ConfigManager", "ScanConfig", "WorkerSettings",
    "LiveConfigChannel", "ResultStore", "load_proxy_list", "generate_proxy_list",
    "ScanEngine", "build_engine", "EventType", "ScanEvent"
]
