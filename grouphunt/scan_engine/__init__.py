from .candidates import CandidateGenerator
from .events import EventType, ScanEvent, EventChannel
from .probe_client import RemoteProbeClient, classify_balance, classify_ownership
from .worker import ProxyWorker
from .engine import ScanEngine, build_engine, default_client_factory

__all__ = [
    "CandidateGenerator", "EventType", "ScanEvent", "EventChannel",
    "RemoteProbeClient", "classify_balance", "classify_ownership",
    "ProxyWorker", "ScanEngine", "build_engine", "default_client_factory"
]
