"""Read the operating system's ARP cache."""

import logging
import re
import subprocess
import sys
from pathlib import Path

logger = logging.getLogger(__name__)

PROC_ARP_PATH = Path("/proc/net/arp")
ARP_COMMAND_TIMEOUT = 5.0

_INCOMPLETE_MACS = {"00:00:00:00:00:00", "ff:ff:ff:ff:ff:ff"}

# "? (192.168.1.1) at aa:bb:cc:dd:ee:ff on en0 ifscope [ethernet]"
_BSD_PATTERN = re.compile(r"\((\d+\.\d+\.\d+\.\d+)\)\s+at\s+([0-9a-fA-F:]+)")
# "  192.168.1.1           aa-bb-cc-dd-ee-ff     dynamic"
_WINDOWS_PATTERN = re.compile(
    r"^\s*(\d+\.\d+\.\d+\.\d+)\s+([0-9a-fA-F]{2}(?:-[0-9a-fA-F]{2}){5})\s"
)


def normalize_mac(mac: str) -> str:
    """Return a MAC in lowercase, colon-separated, zero-padded form.

    Returns "" for anything that is not a six-octet address.
    """
    parts = re.split(r"[:-]", mac.strip())
    if len(parts) != 6:
        return ""
    try:
        return ":".join(f"{int(p, 16):02x}" for p in parts)
    except ValueError:
        return ""


def _add_entry(table: dict[str, str], ip: str, mac: str) -> None:
    mac = normalize_mac(mac)
    if mac and mac not in _INCOMPLETE_MACS:
        table[ip] = mac


def parse_proc_arp(text: str) -> dict[str, str]:
    """Parse the Linux /proc/net/arp table."""
    table: dict[str, str] = {}
    for line in text.splitlines()[1:]:
        fields = line.split()
        if len(fields) < 4:
            continue
        ip, _hw_type, flags, mac = fields[:4]
        try:
            complete = int(flags, 16) & 0x2
        except ValueError:
            logger.debug(f"Skipping malformed ARP row: {line!r}")
            continue
        # ATF_COM unset means resolution never completed
        if not complete:
            continue
        _add_entry(table, ip, mac)
    return table


def parse_arp_output(text: str) -> dict[str, str]:
    """Parse `arp -a` output from macOS/BSD or Windows."""
    table: dict[str, str] = {}
    for line in text.splitlines():
        match = _BSD_PATTERN.search(line) or _WINDOWS_PATTERN.search(line)
        if match:
            ip, mac = match.groups()
            _add_entry(table, ip, mac)
    return table


def read_arp_table() -> dict[str, str]:
    """Return the cached IP -> MAC mapping, or {} if it cannot be read."""
    try:
        if sys.platform.startswith("linux") and PROC_ARP_PATH.exists():
            return parse_proc_arp(PROC_ARP_PATH.read_text())

        result = subprocess.run(
            ["arp", "-a"],
            check=False,
            capture_output=True,
            text=True,
            timeout=ARP_COMMAND_TIMEOUT,
        )
        return parse_arp_output(result.stdout)
    except (OSError, subprocess.SubprocessError, ValueError) as e:
        logger.warning(f"Could not read ARP table: {e}")
        return {}
