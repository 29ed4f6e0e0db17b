"""
Audit Logger — Structured JSON-lines audit trail.

Records every analysed unit with: timestamp, unit id, rule set, verdict,
tier counts, extraction failure and duration. Kept outside reports so
reports stay byte-identical across runs.
"""

from __future__ import annotations

import json
import logging
import threading
import time
from pathlib import Path

from rulegate.config import settings
from rulegate.models.api_models import AuditEntry

logger = logging.getLogger("rulegate.audit")


class AuditLogger:
    """Writes structured audit entries to a JSON-lines file."""

    def __init__(self, log_path: str | None = None, enabled: bool | None = None) -> None:
        self.log_path = Path(log_path or settings.audit_log_path)
        self.enabled = settings.audit_enabled if enabled is None else enabled
        self._lock = threading.Lock()

    def log(self, entry: AuditEntry) -> None:
        """Append an audit entry to the log file."""
        if not self.enabled:
            return
        record = {
            "timestamp": time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime()),
            **entry.model_dump(mode="json"),
        }

        try:
            with self._lock, open(self.log_path, "a") as f:
                f.write(json.dumps(record) + "\n")
        except OSError as e:
            logger.error(f"Failed to write audit log: {e}")

    def read_recent(self, count: int = 50) -> list[dict]:
        """Read the most recent N audit entries."""
        if not self.log_path.exists():
            return []

        entries: list[dict] = []
        try:
            with open(self.log_path) as f:
                for line in f:
                    line = line.strip()
                    if line:
                        try:
                            entries.append(json.loads(line))
                        except json.JSONDecodeError:
                            continue
        except OSError:
            return []

        return entries[-count:]
