"""Per-address detection methods, tried in a fixed order.

Every step treats failure as "no signal": an unreachable host must never
abort the scan. Only an explicit connection refusal counts as evidence
from a failed TCP connect.
"""

import logging
import socket
import subprocess
import sys
from dataclasses import dataclass, field
from typing import Callable

from ..models.scan_result import DetectionMethod
from .payloads import payload_for_port

logger = logging.getLogger(__name__)

# Common services, IoT and media devices
TCP_PORTS = [
    22, 23, 53, 80, 443, 445, 139, 548,  # SSH, Telnet, DNS, HTTP(S), SMB, AFP
    3389, 5900,  # RDP, VNC
    8080, 8443, 8008, 8009,  # HTTP alt, Chromecast
    5353,  # mDNS
    7000, 7100,  # AirPlay
    9100,  # printer (RAW)
    62078,  # Apple iDevice
    1883, 8883,  # MQTT
    554,  # RTSP cameras
    5000, 5001,  # Synology, UPnP
    9090, 3000,  # Prometheus, Grafana, dev servers
]  # fmt: skip

UDP_PORTS = [
    5353,  # mDNS
    1900,  # SSDP
    137,  # NetBIOS
    161,  # SNMP
    53,  # DNS
    123,  # NTP
]

UDP_RECV_SIZE = 512

# Extra time granted to the ping process beyond its own timeout flag
PING_GRACE_SECONDS = 1.0


@dataclass(frozen=True)
class ProbeOutcome:
    """Result of running the cascade against one address."""

    method: DetectionMethod | None = None
    open_ports: list[int] = field(default_factory=list)

    @property
    def detected(self) -> bool:
        return self.method is not None


NO_SIGNAL = ProbeOutcome()


def ping_command(ip: str, timeout: float, platform: str | None = None) -> list[str]:
    """Build the single-echo ping argv for the current platform."""
    platform = platform or sys.platform
    timeout_ms = max(1, int(timeout * 1000))

    if platform.startswith("win"):
        return ["ping", "-n", "1", "-w", str(timeout_ms), ip]
    if platform == "darwin":
        return ["ping", "-c", "1", "-W", str(timeout_ms), ip]
    # Linux iputils takes whole seconds
    return ["ping", "-c", "1", "-W", str(max(1, timeout_ms // 1000)), ip]


def icmp_ping(ip: str, timeout: float) -> bool:
    """Return True if the system ping gets an echo reply."""
    cmd = ping_command(ip, timeout)
    try:
        result = subprocess.run(
            cmd,
            check=False,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            timeout=max(1.0, timeout) + PING_GRACE_SECONDS,
        )
    except subprocess.TimeoutExpired:
        logger.debug(f"ping timed out for {ip}")
        return False
    except OSError as e:
        logger.debug(f"ping failed for {ip}: {e}")
        return False
    return result.returncode == 0


def tcp_probe(
    ip: str, timeout: float, ports: list[int] | None = None
) -> tuple[bool, list[int]]:
    """Try a TCP connect to each port.

    Returns (alive, open_ports). A refused connection proves the host is
    up even though the port is closed.
    """
    alive = False
    open_ports: list[int] = []
    for port in TCP_PORTS if ports is None else ports:
        try:
            with socket.create_connection((ip, port), timeout=timeout):
                pass
        except ConnectionRefusedError:
            alive = True
        except OSError:
            continue
        else:
            alive = True
            open_ports.append(port)
    return alive, open_ports


def udp_check(ip: str, port: int, timeout: float) -> bool:
    """Send a discovery datagram and wait for any non-empty reply."""
    try:
        with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
            sock.settimeout(timeout)
            sock.connect((ip, port))
            sock.send(payload_for_port(port))
            data = sock.recv(UDP_RECV_SIZE)
    except OSError:
        return False
    return len(data) > 0


def udp_probe(ip: str, timeout: float, ports: list[int] | None = None) -> bool:
    """Return True on the first UDP port that answers."""
    for port in UDP_PORTS if ports is None else ports:
        if udp_check(ip, port, timeout):
            logger.debug(f"{ip} answered on udp/{port}")
            return True
    return False


class ProbeCascade:
    """Runs the detection methods for one address, in priority order.

    The step callables are injectable so the orchestration can be tested
    without touching the network.
    """

    def __init__(
        self,
        ping: Callable[[str, float], bool] = icmp_ping,
        tcp: Callable[[str, float], tuple[bool, list[int]]] = tcp_probe,
        udp: Callable[[str, float], bool] = udp_probe,
    ):
        self.ping = ping
        self.tcp = tcp
        self.udp = udp

    def detect(self, ip: str, timeout: float) -> ProbeOutcome:
        """Return the first method that detected the host.

        The TCP sweep always runs so open ports are reported even for hosts
        that answered the ping.
        """
        icmp_alive = self._attempt("icmp", self.ping, ip, timeout, default=False)
        tcp_alive, open_ports = self._attempt(
            "tcp", self.tcp, ip, timeout, default=(False, [])
        )

        if icmp_alive:
            return ProbeOutcome(DetectionMethod.ICMP, sorted(open_ports))
        if tcp_alive:
            return ProbeOutcome(DetectionMethod.TCP, sorted(open_ports))
        if self._attempt("udp", self.udp, ip, timeout, default=False):
            return ProbeOutcome(DetectionMethod.UDP, sorted(open_ports))
        return NO_SIGNAL

    @staticmethod
    def _attempt(name: str, step: Callable, ip: str, timeout: float, default):
        try:
            return step(ip, timeout)
        except Exception as e:
            logger.debug(f"{name} probe error for {ip}: {e}")
            return default

    __call__ = detect
