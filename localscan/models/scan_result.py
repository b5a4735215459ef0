"""Host discovery result models."""

import ipaddress
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field, field_validator


class DetectionMethod(str, Enum):
    """How a host was detected."""

    ICMP = "ICMP"
    TCP = "TCP"
    UDP = "UDP"
    ARP = "ARP"


class DiffStatus(str, Enum):
    """Status of a host relative to the previous scan."""

    NEW = "NEW"
    GONE = "GONE"


class HistoryRecord(BaseModel):
    """Persisted form of a discovered host (no diff status)."""

    ip: str
    hostname: str = ""
    mac: str = ""
    vendor: str = ""
    method: DetectionMethod
    open_ports: list[int] = Field(default_factory=list)

    @field_validator("open_ports", mode="before")
    @classmethod
    def none_to_empty(cls, v):
        """Older files may carry null instead of an empty list."""
        return [] if v is None else v


class DetectionResult(BaseModel):
    """A discovered network host."""

    ip: str
    method: DetectionMethod
    open_ports: list[int] = Field(default_factory=list)
    hostname: str = ""
    mac: str = ""
    vendor: str = ""
    status: DiffStatus | None = None

    @field_validator("ip")
    @classmethod
    def validate_ip(cls, v: str) -> str:
        """Validate and canonicalise an IPv4 address."""
        try:
            return str(ipaddress.IPv4Address(v))
        except ValueError as e:
            raise ValueError(f"Invalid IPv4 address '{v}': {e}")

    @field_validator("open_ports")
    @classmethod
    def sort_ports(cls, v: list[int]) -> list[int]:
        return sorted(set(v))

    @property
    def sort_key(self) -> int:
        """Numeric address value used for ordering."""
        return int(ipaddress.IPv4Address(self.ip))

    @property
    def is_gone(self) -> bool:
        return self.status == DiffStatus.GONE

    def to_history(self) -> HistoryRecord:
        """Convert to the persisted form, dropping the diff status."""
        return HistoryRecord(
            ip=self.ip,
            hostname=self.hostname,
            mac=self.mac,
            vendor=self.vendor,
            method=self.method,
            open_ports=list(self.open_ports),
        )

    @classmethod
    def from_history(cls, record: HistoryRecord) -> "DetectionResult":
        return cls(
            ip=record.ip,
            method=record.method,
            open_ports=list(record.open_ports),
            hostname=record.hostname,
            mac=record.mac,
            vendor=record.vendor,
        )


def sort_by_address(hosts: list[DetectionResult]) -> list[DetectionResult]:
    """Return hosts ordered by ascending numeric address."""
    return sorted(hosts, key=lambda h: h.sort_key)


class ProgressEvent(BaseModel):
    """One processed address, reported while a scan runs."""

    current: int
    total: int
    ip: str
    found: DetectionResult | None = None


class ScanResult(BaseModel):
    """Result of a network scan."""

    network: str
    hosts: list[DetectionResult] = Field(default_factory=list)
    scan_time: datetime = Field(default_factory=datetime.now)
    duration_seconds: float = 0.0
    error: str | None = None

    def sorted(self) -> "ScanResult":
        """Return a copy with hosts ordered by address."""
        return self.model_copy(update={"hosts": sort_by_address(self.hosts)})
