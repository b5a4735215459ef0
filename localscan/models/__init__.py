"""Data models for localscan."""

from .config import ScanConfig
from .network import NetworkDescriptor
from .scan_result import (
    DetectionMethod,
    DetectionResult,
    DiffStatus,
    HistoryRecord,
    ProgressEvent,
    ScanResult,
    sort_by_address,
)

__all__ = [
    "DetectionMethod",
    "DetectionResult",
    "DiffStatus",
    "HistoryRecord",
    "NetworkDescriptor",
    "ProgressEvent",
    "ScanConfig",
    "ScanResult",
    "sort_by_address",
]
