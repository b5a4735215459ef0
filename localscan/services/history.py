"""Persistence of the previous scan for diffing."""

import json
import logging
import tempfile
from pathlib import Path

from pydantic import TypeAdapter, ValidationError

from ..exceptions import HistoryError
from ..models.config import DEFAULT_HISTORY_PATH
from ..models.scan_result import DetectionResult, HistoryRecord
from .diff import persistable

logger = logging.getLogger(__name__)

_records_adapter = TypeAdapter(list[HistoryRecord])


class HistoryStore:
    """Stores the last scan's hosts as a JSON array."""

    def __init__(self, path: Path | str = DEFAULT_HISTORY_PATH):
        self.path = Path(path).expanduser()

    def load(self) -> list[DetectionResult]:
        """Load the previous scan.

        Returns [] if there is no history file; raises HistoryError if the
        file cannot be read or parsed.
        """
        if not self.path.exists():
            logger.debug(f"No scan history at {self.path}")
            return []

        try:
            with open(self.path) as f:
                data = json.load(f)
            records = _records_adapter.validate_python(data)
        except json.JSONDecodeError as e:
            raise HistoryError(f"Invalid JSON in history file {self.path}: {e}") from e
        except ValidationError as e:
            raise HistoryError(f"Invalid history file {self.path}: {e}") from e
        except OSError as e:
            raise HistoryError(f"Cannot read history file {self.path}: {e}") from e

        hosts = []
        for record in records:
            try:
                hosts.append(DetectionResult.from_history(record))
            except ValidationError as e:
                logger.warning(f"Skipping invalid history entry {record.ip}: {e}")

        logger.debug(f"Loaded {len(hosts)} hosts from {self.path}")
        return hosts

    def load_or_empty(self) -> list[DetectionResult]:
        """Load the previous scan, treating any failure as no previous scan."""
        try:
            return self.load()
        except HistoryError as e:
            logger.warning(f"{e}; treating all hosts as new")
            return []

    def save(self, hosts: list[DetectionResult]) -> bool:
        """Overwrite the history with the hosts seen in this scan.

        GONE entries are never written.
        """
        records = [host.to_history() for host in persistable(hosts)]
        tmp_path = None
        try:
            payload = json.dumps([record.model_dump(mode="json") for record in records], indent=2)
            self.path.parent.mkdir(parents=True, exist_ok=True)
            # Write beside the target then rename, so a failed write never
            # leaves a truncated history behind.
            with tempfile.NamedTemporaryFile(
                "w", dir=self.path.parent, prefix=".last_", suffix=".tmp", delete=False
            ) as f:
                tmp_path = Path(f.name)
                f.write(payload)
            tmp_path.replace(self.path)
            logger.debug(f"Saved {len(records)} hosts to {self.path}")
            return True
        except (OSError, TypeError) as e:
            if tmp_path is not None:
                tmp_path.unlink(missing_ok=True)
            logger.warning(f"Failed to save scan history: {e}")
            return False
