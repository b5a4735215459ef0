"""Services for probing, enriching and diffing network scans."""

from .diff import compute_diff, persistable
from .history import HistoryStore
from .network_info import detect_interface, hosts_in_network
from .network_scanner import NetworkScanner
from .probes import ProbeCascade, ProbeOutcome

__all__ = [
    "HistoryStore",
    "NetworkScanner",
    "ProbeCascade",
    "ProbeOutcome",
    "compute_diff",
    "detect_interface",
    "hosts_in_network",
    "persistable",
]
