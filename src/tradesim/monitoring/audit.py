"""Append-only audit log for simulation events."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any


class AuditLog:
    def __init__(self, path: str | Path, run_id: str | None = None, config_hash: str | None = None) -> None:
        self.path = Path(path)
        self.run_id = run_id
        self.config_hash = config_hash
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def log(self, event: str, payload: dict[str, Any]) -> None:
        record = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "run_id": self.run_id,
            "config_hash": self.config_hash,
            "event": event,
            "payload": payload,
        }
        with self.path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(record, default=str))
            handle.write("\n")

    def read(self, simulation_id: str | None = None, limit: int | None = None) -> list[dict[str, Any]]:
        """Return logged records, oldest first.

        ``simulation_id`` keeps only events whose payload names that simulation;
        ``limit`` keeps the most recent matches.
        """
        if not self.path.exists():
            return []
        records = [
            json.loads(line)
            for line in self.path.read_text(encoding="utf-8").splitlines()
            if line.strip()
        ]
        if simulation_id is not None:
            records = [record for record in records if record["payload"].get("simulation_id") == simulation_id]
        if limit is not None:
            records = records[-limit:]
        return records
