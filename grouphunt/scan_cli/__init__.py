from .cli import main_cli, run_scan
from .monitor import ScanMonitor, MonitoringStats, compare_to_premium

__all__ = [
    "main_cli", "run_scan",
    "ScanMonitor", "MonitoringStats", "compare_to_premium"
]
