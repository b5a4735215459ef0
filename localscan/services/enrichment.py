"""Hostname, MAC and vendor enrichment for discovered hosts."""

import asyncio
import logging
import socket
from concurrent.futures import ThreadPoolExecutor

from ..models.scan_result import DetectionResult
from .arp_table import normalize_mac, read_arp_table

logger = logging.getLogger(__name__)

UNKNOWN = "-"

# First lookup may download the OUI database
VENDOR_DB_TIMEOUT = 10.0

# Upper bound on concurrent reverse lookups
DNS_LOOKUP_WORKERS = 64

# Lazy-loaded mac-vendor-lookup instance
_mac_lookup_instance = None
_mac_lookup_initialized = False

FALLBACK_VENDORS = {
    "00-50-56": "VMware",
    "00-0C-29": "VMware",
    "08-00-27": "VirtualBox",
    "52-54-00": "QEMU",
    "B8-27-EB": "Raspberry Pi",
    "DC-A6-32": "Raspberry Pi",
    "E4-5F-01": "Raspberry Pi",
    "00-17-88": "Philips Hue",
    "EC-B5-FA": "Philips Hue",
}

VENDOR_SHORTENINGS = {
    "Apple, Inc.": "Apple",
    "Samsung Electronics Co.,Ltd": "Samsung",
    "Intel Corporate": "Intel",
    "Raspberry Pi Foundation": "Raspberry Pi",
    "Raspberry Pi Trading Ltd": "Raspberry Pi",
    "HUAWEI TECHNOLOGIES CO.,LTD": "Huawei",
    "Amazon Technologies Inc.": "Amazon",
    "Google, Inc.": "Google",
    "Microsoft Corporation": "Microsoft",
    "Sony Corporation": "Sony",
    "Xiaomi Communications Co Ltd": "Xiaomi",
    "TP-LINK TECHNOLOGIES CO.,LTD.": "TP-Link",
    "ASUSTek COMPUTER INC.": "ASUS",
    "Hewlett Packard": "HP",
    "Dell Inc.": "Dell",
    "Cisco Systems, Inc": "Cisco",
    "Belkin International Inc.": "Belkin",
    "Hon Hai Precision Ind. Co.,Ltd.": "Foxconn",
    "Espressif Inc.": "Espressif",
}


def _get_mac_lookup():
    """Lazy-load mac-vendor-lookup, which reads its OUI database on first use."""
    global _mac_lookup_instance, _mac_lookup_initialized

    if _mac_lookup_initialized:
        return _mac_lookup_instance

    _mac_lookup_initialized = True
    try:
        from mac_vendor_lookup import AsyncMacLookup

        _mac_lookup_instance = AsyncMacLookup()
    except ImportError:
        logger.debug("mac-vendor-lookup not installed, using fallback vendor list")
        _mac_lookup_instance = None

    return _mac_lookup_instance


def _disable_mac_lookup() -> None:
    global _mac_lookup_instance
    _mac_lookup_instance = None


def shorten_vendor_name(vendor: str) -> str:
    """Shorten common long vendor names for display."""
    return VENDOR_SHORTENINGS.get(vendor, vendor)


async def lookup_vendor(mac: str) -> str:
    """Return the vendor for a MAC address, or "" if unknown."""
    mac = normalize_mac(mac)
    if not mac:
        return ""

    mac_lookup = _get_mac_lookup()
    if mac_lookup:
        try:
            vendor = await asyncio.wait_for(mac_lookup.lookup(mac), timeout=VENDOR_DB_TIMEOUT)
            if vendor:
                return shorten_vendor_name(vendor)
        except KeyError:
            pass  # Unknown prefix, fall through to the built-in table
        except Exception as e:
            # No usable database: stop trying for the rest of this run
            logger.debug(f"Vendor database unavailable: {e}")
            _disable_mac_lookup()

    oui_prefix = mac[:8].upper().replace(":", "-")
    return FALLBACK_VENDORS.get(oui_prefix, "")


def resolve_hostname(ip: str) -> str:
    """Reverse-resolve an address to its short hostname, or ""."""
    try:
        hostname, _, _ = socket.gethostbyaddr(ip)
    except (socket.herror, socket.gaierror, OSError):
        return ""
    return hostname.split(".")[0]


async def _resolve_hostnames(hosts: list[DetectionResult], dns_timeout: float) -> None:
    loop = asyncio.get_running_loop()
    workers = min(DNS_LOOKUP_WORKERS, len(hosts))
    executor = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="localscan-dns")
    # A slot is held until its lookup thread returns, so the timeout only
    # counts time spent resolving and never time spent waiting for a thread.
    slots = asyncio.Semaphore(workers)

    def finished(lookup: asyncio.Future) -> None:
        slots.release()
        if not lookup.cancelled():
            lookup.exception()

    async def resolve_one(host: DetectionResult) -> None:
        hostname = ""
        await slots.acquire()
        lookup = loop.run_in_executor(executor, resolve_hostname, host.ip)
        lookup.add_done_callback(finished)
        try:
            hostname = await asyncio.wait_for(asyncio.shield(lookup), timeout=dns_timeout)
        except TimeoutError:
            logger.debug(f"DNS lookup timeout for {host.ip}")
        except Exception as e:
            logger.debug(f"DNS lookup error for {host.ip}: {e}")
        host.hostname = hostname or UNKNOWN

    try:
        await asyncio.gather(*(resolve_one(host) for host in hosts))
    finally:
        # Lookups past their timeout may still hold threads
        executor.shutdown(wait=False)


async def enrich_hosts(
    hosts: list[DetectionResult],
    arp_table: dict[str, str] | None = None,
    dns_timeout: float = 1.0,
) -> list[DetectionResult]:
    """Fill hostname, MAC and vendor for each host in place.

    Missing values are shown as "-". Lookups never raise.
    """
    loop = asyncio.get_running_loop()
    if arp_table is None:
        arp_table = await loop.run_in_executor(None, read_arp_table)

    if hosts:
        await _resolve_hostnames(hosts, dns_timeout)

    # Sequential so the vendor database is loaded once
    for host in hosts:
        mac = arp_table.get(host.ip, "")
        if mac:
            host.mac = mac
            host.vendor = await lookup_vendor(mac) or UNKNOWN
        else:
            host.mac = UNKNOWN
            host.vendor = UNKNOWN

    return hosts
