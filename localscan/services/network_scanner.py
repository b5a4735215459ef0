"""Concurrent multi-method host discovery."""

import asyncio
import ipaddress
import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from typing import Callable, Iterable

from ..models.network import NetworkDescriptor
from ..models.scan_result import (
    DetectionMethod,
    DetectionResult,
    ProgressEvent,
    ScanResult,
    sort_by_address,
)
from .arp_table import read_arp_table
from .network_info import hosts_in_network
from .probes import NO_SIGNAL, ProbeCascade, ProbeOutcome

logger = logging.getLogger(__name__)

DEFAULT_WORKERS = 100
DEFAULT_TIMEOUT = 0.5


class _ScanComplete:
    def __repr__(self) -> str:
        return "SCAN_COMPLETE"


# Put on the progress queue after the last event of a scan
SCAN_COMPLETE = _ScanComplete()


class DiscoverySet:
    """Address-deduplicated discoveries shared by all probe workers."""

    def __init__(self):
        self._lock = threading.Lock()
        self._seen: set[str] = set()
        self._results: list[DetectionResult] = []

    def add(self, result: DetectionResult) -> bool:
        """Record a discovery. Returns False if the address was already found."""
        with self._lock:
            if result.ip in self._seen:
                return False
            self._seen.add(result.ip)
            self._results.append(result)
            return True

    def __contains__(self, ip: str) -> bool:
        with self._lock:
            return ip in self._seen

    def __len__(self) -> int:
        with self._lock:
            return len(self._results)

    def results(self) -> list[DetectionResult]:
        with self._lock:
            return list(self._results)


class ProgressTracker:
    """Keeps the displayed completed-count monotonic.

    Events arrive in completion order across workers, so an individual
    event's count may be lower than one already seen.
    """

    def __init__(self, total: int = 0):
        self.total = total
        self.maximum = 0
        self.events = 0

    def update(self, event: ProgressEvent) -> int:
        self.events += 1
        self.total = event.total or self.total
        if event.current > self.maximum:
            self.maximum = event.current
        return self.maximum


class NetworkScanner:
    """Probes every address of a subnet with a bounded pool of workers."""

    def __init__(
        self,
        workers: int = DEFAULT_WORKERS,
        timeout: float = DEFAULT_TIMEOUT,
        cascade: ProbeCascade | Callable[[str, float], ProbeOutcome] | None = None,
        arp_reader: Callable[[], dict[str, str]] = read_arp_table,
    ):
        if workers < 1:
            raise ValueError(f"workers must be at least 1, got {workers}")
        self.workers = workers
        self.timeout = timeout
        self.cascade = cascade or ProbeCascade()
        self.arp_reader = arp_reader

    def _probe(self, ip: str, discoveries: DiscoverySet) -> DetectionResult | None:
        """Run the cascade for one address (in a worker thread)."""
        try:
            outcome = self.cascade(ip, self.timeout)
        except Exception as e:
            logger.debug(f"Probe cascade failed for {ip}: {e}")
            outcome = NO_SIGNAL

        if not outcome.detected:
            return None

        result = DetectionResult(ip=ip, method=outcome.method, open_ports=outcome.open_ports)
        if discoveries.add(result):
            logger.debug(f"Found {ip} via {outcome.method.value}")
            return result
        return None

    async def scan(
        self,
        hosts: Iterable[ipaddress.IPv4Address | str],
        progress: asyncio.Queue | None = None,
    ) -> list[DetectionResult]:
        """Probe all hosts, then recover ARP-only hosts.

        Exactly one ProgressEvent is put on `progress` per address, plus one
        per ARP discovery, followed by SCAN_COMPLETE. Returns discoveries
        ordered by address.
        """
        addresses = [str(h) for h in hosts]
        total = len(addresses)
        discoveries = DiscoverySet()

        jobs: asyncio.Queue[str] = asyncio.Queue()
        for ip in addresses:
            jobs.put_nowait(ip)

        completed = 0
        loop = asyncio.get_running_loop()

        with ThreadPoolExecutor(
            max_workers=self.workers, thread_name_prefix="localscan-probe"
        ) as executor:

            async def worker() -> None:
                nonlocal completed
                while True:
                    try:
                        ip = jobs.get_nowait()
                    except asyncio.QueueEmpty:
                        return
                    found = await loop.run_in_executor(executor, self._probe, ip, discoveries)
                    completed += 1
                    if progress is not None:
                        await progress.put(
                            ProgressEvent(current=completed, total=total, ip=ip, found=found)
                        )

            await asyncio.gather(*(worker() for _ in range(min(self.workers, total))))

        logger.info(f"Active probing found {len(discoveries)} of {total} hosts")

        # The probes above populated the ARP cache, so this must run after
        # every worker has finished.
        arp_table = await loop.run_in_executor(None, self._read_arp_table)
        for ip in addresses:
            if ip in discoveries or not arp_table.get(ip):
                continue
            result = DetectionResult(ip=ip, method=DetectionMethod.ARP)
            if discoveries.add(result) and progress is not None:
                await progress.put(ProgressEvent(current=total, total=total, ip=ip, found=result))

        if progress is not None:
            await progress.put(SCAN_COMPLETE)

        return sort_by_address(discoveries.results())

    def _read_arp_table(self) -> dict[str, str]:
        try:
            return self.arp_reader()
        except Exception as e:
            logger.warning(f"ARP table lookup failed: {e}")
            return {}

    async def run(
        self,
        hosts: Iterable[ipaddress.IPv4Address | str],
        on_progress: Callable[[ProgressEvent], None] | None = None,
    ) -> list[DetectionResult]:
        """Scan while a consumer task delivers progress events to on_progress."""
        queue: asyncio.Queue = asyncio.Queue(maxsize=self.workers)

        async def consume() -> None:
            while True:
                event = await queue.get()
                if event is SCAN_COMPLETE:
                    return
                if on_progress is not None:
                    try:
                        on_progress(event)
                    except Exception as e:
                        logger.warning(f"Progress callback failed: {e}")

        consumer = asyncio.create_task(consume())
        try:
            results = await self.scan(hosts, queue)
        except BaseException:
            consumer.cancel()
            raise
        await consumer
        return results

    async def scan_network(
        self,
        network: NetworkDescriptor,
        on_progress: Callable[[ProgressEvent], None] | None = None,
    ) -> ScanResult:
        """Scan every usable address of a network and return a ScanResult."""
        start_time = datetime.now()
        try:
            hosts = await self.run(hosts_in_network(network), on_progress)
            duration = (datetime.now() - start_time).total_seconds()
            return ScanResult(
                network=network.cidr,
                hosts=hosts,
                scan_time=start_time,
                duration_seconds=duration,
            )
        except PermissionError:
            return ScanResult(
                network=network.cidr,
                error="Permission denied while probing the network",
                scan_time=start_time,
            )
        except Exception as e:
            logger.error(f"Scan error for {network.cidr}: {e}")
            return ScanResult(network=network.cidr, error=str(e), scan_time=start_time)
