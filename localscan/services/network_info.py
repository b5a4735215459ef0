"""Interface detection and subnet address enumeration."""

import ipaddress
import logging
import socket

import psutil

from ..exceptions import InterfaceNotFoundError
from ..models.network import NetworkDescriptor

logger = logging.getLogger(__name__)


def hosts_in_network(
    network: ipaddress.IPv4Network | NetworkDescriptor | str,
) -> list[ipaddress.IPv4Address]:
    """Return usable host addresses in ascending order.

    The network and broadcast addresses are excluded. A /0 or /32 prefix
    yields no addresses.
    """
    if isinstance(network, NetworkDescriptor):
        network = network.network
    elif isinstance(network, str):
        network = ipaddress.IPv4Network(network, strict=False)

    if network.prefixlen in (0, network.max_prefixlen):
        return []

    first = int(network.network_address) + 1
    last = int(network.broadcast_address) - 1
    return [ipaddress.IPv4Address(value) for value in range(first, last + 1)]


def _prefixlen(netmask: str | None) -> int | None:
    if not netmask:
        return None
    try:
        return ipaddress.IPv4Network(f"0.0.0.0/{netmask}").prefixlen
    except ValueError:
        return None


def detect_interface(name: str | None = None) -> NetworkDescriptor:
    """Find an active non-loopback interface with an IPv4 address.

    If name is given, only that interface is considered.
    """
    try:
        addrs = psutil.net_if_addrs()
        stats = psutil.net_if_stats()
    except (OSError, psutil.Error) as e:
        raise InterfaceNotFoundError(f"list interfaces: {e}") from e

    for iface, iface_addrs in addrs.items():
        if name and iface != name:
            continue
        iface_stats = stats.get(iface)
        if iface_stats is not None and not iface_stats.isup:
            logger.debug(f"Skipping {iface}: interface is down")
            continue

        for addr in iface_addrs:
            if addr.family != socket.AF_INET:
                continue
            try:
                ip = ipaddress.IPv4Address(addr.address)
            except ValueError:
                continue
            if ip.is_loopback:
                continue
            prefixlen = _prefixlen(addr.netmask)
            if prefixlen is None:
                logger.debug(f"Skipping {iface} {ip}: no usable netmask")
                continue

            descriptor = NetworkDescriptor(interface=iface, address=str(ip), prefixlen=prefixlen)
            logger.info(f"Using interface {iface} ({descriptor.cidr})")
            return descriptor

    if name:
        raise InterfaceNotFoundError(f"interface {name!r} not found or has no IPv4 address")
    raise InterfaceNotFoundError("no active network interface found")
