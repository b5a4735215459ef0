"""Final result rendering: table, JSON and CSV."""

import csv
import json
from typing import TextIO

from rich import box
from rich.console import Console
from rich.table import Table

from ..models.scan_result import DetectionResult, DiffStatus

FORMATS = ("table", "json", "csv")

FILE_WIDTH = 200


def format_ports(ports: list[int]) -> str:
    """Comma-separated ascending port list, or "-" when there are none."""
    if not ports:
        return "-"
    return ",".join(str(p) for p in sorted(ports))


def _has_diff(hosts: list[DetectionResult]) -> bool:
    return any(h.status is not None for h in hosts)


def _status_display(host: DetectionResult) -> str:
    if host.status == DiffStatus.NEW:
        return "[yellow]NEW[/yellow]"
    if host.status == DiffStatus.GONE:
        return "[red]GONE[/red]"
    return ""


def build_table(hosts: list[DetectionResult]) -> Table:
    """Build a rich Table of hosts; the Status column appears only after a diff."""
    show_status = _has_diff(hosts)

    table = Table(box=box.ASCII, show_lines=False)
    table.add_column("#", justify="right")
    table.add_column("IP Address")
    table.add_column("Hostname")
    table.add_column("MAC Address")
    table.add_column("Vendor")
    table.add_column("Method")
    table.add_column("Ports")
    if show_status:
        table.add_column("Status")

    for index, host in enumerate(hosts, start=1):
        row = [
            str(index),
            host.ip,
            host.hostname or "-",
            host.mac or "-",
            host.vendor or "-",
            host.method.value,
            format_ports(host.open_ports),
        ]
        if show_status:
            row.append(_status_display(host))
        table.add_row(*row)

    return table


def render_table(hosts: list[DetectionResult], elapsed: str, out: TextIO) -> None:
    # Files and pipes get a wide virtual terminal so columns are never truncated
    width = None if out.isatty() else FILE_WIDTH
    console = Console(file=out, highlight=False, soft_wrap=False, width=width)
    if not hosts:
        console.print("No devices found.")
        return
    console.print(build_table(hosts))
    console.print(f"Found {len(hosts)} devices in {elapsed}")


def to_json_rows(hosts: list[DetectionResult]) -> list[dict]:
    """One object per host; open_ports is always a list, status only when set."""
    rows = []
    for host in hosts:
        row = {
            "ip": host.ip,
            "hostname": host.hostname,
            "mac": host.mac,
            "vendor": host.vendor,
            "method": host.method.value,
            "open_ports": list(host.open_ports),
        }
        if host.status is not None:
            row["status"] = host.status.value
        rows.append(row)
    return rows


def render_json(hosts: list[DetectionResult], elapsed: str, out: TextIO) -> None:
    json.dump(to_json_rows(hosts), out, indent=2)
    out.write("\n")


def render_csv(hosts: list[DetectionResult], elapsed: str, out: TextIO) -> None:
    show_status = _has_diff(hosts)
    writer = csv.writer(out)

    header = ["IP", "Hostname", "MAC", "Vendor", "Method", "OpenPorts"]
    if show_status:
        header.append("Status")
    writer.writerow(header)

    for host in hosts:
        row = [
            host.ip,
            host.hostname,
            host.mac,
            host.vendor,
            host.method.value,
            format_ports(host.open_ports),
        ]
        if show_status:
            row.append(host.status.value if host.status else "")
        writer.writerow(row)


_RENDERERS = {
    "table": render_table,
    "json": render_json,
    "csv": render_csv,
}


def render(hosts: list[DetectionResult], output_format: str, elapsed: str, out: TextIO) -> None:
    """Write hosts to out in the requested format."""
    try:
        renderer = _RENDERERS[output_format]
    except KeyError:
        raise ValueError(f"unknown format {output_format!r} (use table, json, or csv)")
    renderer(hosts, elapsed, out)
