"""Network interface and subnet models."""

import ipaddress

from pydantic import BaseModel, Field, field_validator


class NetworkDescriptor(BaseModel):
    """An IPv4 interface address and its subnet prefix."""

    interface: str = ""
    address: str
    prefixlen: int = Field(..., ge=0, le=32)

    @field_validator("address")
    @classmethod
    def validate_address(cls, v: str) -> str:
        """Validate that address is a dotted-quad IPv4 address."""
        try:
            ipaddress.IPv4Address(v)
        except ValueError as e:
            raise ValueError(f"Invalid IPv4 address '{v}': {e}")
        return v

    @classmethod
    def from_cidr(cls, cidr: str, interface: str = "") -> "NetworkDescriptor":
        """Build a descriptor from 'a.b.c.d/nn' notation."""
        iface = ipaddress.IPv4Interface(cidr)
        return cls(
            interface=interface,
            address=str(iface.ip),
            prefixlen=iface.network.prefixlen,
        )

    @property
    def network(self) -> ipaddress.IPv4Network:
        return ipaddress.IPv4Network(f"{self.address}/{self.prefixlen}", strict=False)

    @property
    def cidr(self) -> str:
        """Network address in CIDR notation, e.g. 192.168.1.0/24."""
        return str(self.network)

    @property
    def usable_host_count(self) -> int:
        """Number of host addresses, excluding network and broadcast."""
        if self.prefixlen in (0, 32):
            return 0
        return max(0, 2 ** (32 - self.prefixlen) - 2)
