"""Entry point for running localscan as a module."""

import argparse
import asyncio
import logging
import sys
import time
from contextlib import nullcontext
from logging.handlers import RotatingFileHandler
from pathlib import Path

from .components.progress import ProgressDisplay
from .components.results import FORMATS, render
from .exceptions import ConfigurationError, InterfaceNotFoundError
from .models.config import ScanConfig
from .models.scan_result import ScanResult
from .services.arp_table import read_arp_table
from .services.diff import compute_diff
from .services.enrichment import enrich_hosts
from .services.history import HistoryStore
from .services.network_info import detect_interface
from .services.network_scanner import NetworkScanner

_logger = logging.getLogger(__name__)

LOG_DIR = Path.home() / ".localscan" / "logs"


def setup_logging(log_level: str = "WARNING") -> None:
    """Configure logging with rotation support.

    Args:
        log_level: The logging level (DEBUG, INFO, WARNING, ERROR)
    """
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]

    try:
        LOG_DIR.mkdir(parents=True, exist_ok=True)
        # Rotate at 10MB, keep 5 backup files
        file_handler = RotatingFileHandler(
            LOG_DIR / "localscan.log",
            maxBytes=10 * 1024 * 1024,
            backupCount=5,
            encoding="utf-8",
        )
        file_handler.setLevel(logging.DEBUG)
        handlers.append(file_handler)
    except (PermissionError, OSError):
        pass  # Skip file logging if we can't write

    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=handlers,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="localscan",
        description="localscan - discover devices on the local IPv4 network",
    )
    parser.add_argument(
        "--interface",
        default="",
        help="Network interface to use (auto-detect if empty)",
    )
    parser.add_argument(
        "--timeout",
        type=int,
        default=500,
        help="Connection timeout in milliseconds (default: 500)",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=100,
        help="Number of concurrent workers (default: 100)",
    )
    parser.add_argument(
        "--format",
        default="table",
        help=f"Output format: {', '.join(FORMATS)} (default: table)",
    )
    parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=None,
        help="Output file path (default: stdout)",
    )
    parser.add_argument(
        "--diff",
        action="store_true",
        help="Compare with previous scan results",
    )
    parser.add_argument(
        "--history",
        type=Path,
        default=None,
        help="Path of the saved previous scan (default: ~/.localscan/last.json)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    parser.add_argument(
        "-V",
        "--version",
        action="store_true",
        help="Show version and exit",
    )
    return parser


def _fatal(message: str) -> None:
    print(f"Error: {message}", file=sys.stderr)
    sys.exit(1)


def config_from_args(args: argparse.Namespace) -> ScanConfig:
    """Validate parsed arguments into a ScanConfig."""
    values = {
        "interface": args.interface,
        "timeout_ms": args.timeout,
        "workers": args.workers,
        "output_format": args.format,
        "output": args.output,
        "diff": args.diff,
        "log_level": "DEBUG" if args.verbose else "WARNING",
    }
    if args.history is not None:
        values["history_path"] = args.history
    return ScanConfig.from_args(**values)


async def run_scan(config: ScanConfig, show_progress: bool = True) -> ScanResult:
    """Detect the network, scan it, enrich the results and apply the diff."""
    network = detect_interface(config.interface)
    if network.usable_host_count == 0:
        raise ConfigurationError(f"no hosts in network {network.cidr}")

    scanner = NetworkScanner(workers=config.workers, timeout=config.timeout)
    display = (
        ProgressDisplay(network.cidr, network.usable_host_count) if show_progress else None
    )
    with display or nullcontext():
        result = await scanner.scan_network(network, on_progress=display)
    if result.error:
        _logger.error(f"Scan failed: {result.error}")
        return result

    loop = asyncio.get_running_loop()
    arp_table = await loop.run_in_executor(None, read_arp_table)
    hosts = await enrich_hosts(result.hosts, arp_table, config.dns_timeout_seconds)
    result = result.model_copy(update={"hosts": hosts}).sorted()

    if config.diff:
        store = HistoryStore(config.history_path)
        if not store.path.exists():
            print("Note: no previous scan data found, all hosts marked as NEW", file=sys.stderr)
        previous = store.load_or_empty()
        result = result.model_copy(update={"hosts": compute_diff(result.hosts, previous)})
        if not store.save(result.hosts):
            print("Warning: failed to save scan history", file=sys.stderr)

    return result


def main(argv: list[str] | None = None) -> None:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    if args.version:
        from . import __version__

        print(f"localscan v{__version__}")
        sys.exit(0)

    try:
        config = config_from_args(args)
    except ConfigurationError as e:
        _fatal(str(e))

    setup_logging(config.log_level)
    start = time.monotonic()

    try:
        result = asyncio.run(run_scan(config))
    except (ConfigurationError, InterfaceNotFoundError) as e:
        _fatal(str(e))

    if result.error:
        _fatal(result.error)

    elapsed = f"{time.monotonic() - start:.1f}s"

    if config.output is None:
        render(result.hosts, config.output_format, elapsed, sys.stdout)
        return

    try:
        with open(config.output, "w", newline="") as out:
            render(result.hosts, config.output_format, elapsed, out)
    except OSError as e:
        _fatal(f"cannot create output file: {e}")


if __name__ == "__main__":
    main()
