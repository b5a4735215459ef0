"""Live scan progress on stderr."""

from rich.console import Console
from rich.markup import escape
from rich.progress import BarColumn, MofNCompleteColumn, Progress, TextColumn

from ..models.scan_result import ProgressEvent
from ..services.network_scanner import ProgressTracker

BAR_WIDTH = 40


class ProgressDisplay:
    """Renders progress events as a bar plus one line per discovered host.

    Use as a context manager around the scan; pass the instance as the
    scanner's on_progress callback.
    """

    def __init__(self, cidr: str, total: int, console: Console | None = None):
        self.cidr = cidr
        self.total = total
        self.console = console or Console(stderr=True)
        self.tracker = ProgressTracker(total)
        self.found: list[str] = []
        self._progress = Progress(
            TextColumn("[bold blue]{task.description}"),
            BarColumn(bar_width=BAR_WIDTH),
            MofNCompleteColumn(),
            TextColumn("[dim]{task.fields[ip]}"),
            console=self.console,
            transient=True,
        )
        self._task_id = self._progress.add_task("Scanning", total=max(total, 1), ip="")

    def __enter__(self) -> "ProgressDisplay":
        self.console.print(f"Scanning [bold]{self.cidr}[/bold] ({self.total} hosts)...")
        self._progress.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self._progress.stop()
        if exc_type is None:
            self.console.print(f"[green]Complete[/green] {self.tracker.maximum}/{self.total}\n")

    def __call__(self, event: ProgressEvent) -> None:
        self.update(event)

    def update(self, event: ProgressEvent) -> None:
        current = self.tracker.update(event)
        if event.found is not None:
            line = f"[+] Found: {event.found.ip} [{event.found.method.value}]"
            self.found.append(line)
            self.console.print(f"[green]{escape(line)}[/green]", highlight=False)
        self._progress.update(self._task_id, completed=current, ip=f"scanning {event.ip}...")
