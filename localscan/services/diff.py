"""Classify a scan against the previous one."""

from ..models.scan_result import DetectionResult, DiffStatus, sort_by_address


def compute_diff(
    current: list[DetectionResult], previous: list[DetectionResult]
) -> list[DetectionResult]:
    """Mark hosts as NEW, continuing (no status) or GONE.

    Hosts only in `current` become NEW. Hosts only in `previous` are appended
    as GONE with their last known data. Neither input is modified, so the
    same inputs always give the same output.
    """
    previous_ips = {host.ip for host in previous}
    current_ips = {host.ip for host in current}

    diffed = [
        host.model_copy(
            update={"status": None if host.ip in previous_ips else DiffStatus.NEW},
            deep=True,
        )
        for host in current
    ]
    gone_ips: set[str] = set()
    for host in previous:
        if host.ip in current_ips or host.ip in gone_ips:
            continue
        gone_ips.add(host.ip)
        diffed.append(host.model_copy(update={"status": DiffStatus.GONE}, deep=True))
    return sort_by_address(diffed)


def persistable(hosts: list[DetectionResult]) -> list[DetectionResult]:
    """Return the hosts that belong in the saved history (everything but GONE)."""
    return [host for host in hosts if not host.is_gone]
