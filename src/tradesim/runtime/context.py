"""Run context creation and metadata."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from tradesim.config.loader import compute_config_hash
from tradesim.monitoring.audit import AuditLog


@dataclass(frozen=True)
class RunContext:
    run_id: str
    config_path: Path
    config_hash: str
    started_at: datetime
    simulation_id: Optional[str] = None

    def audit_log(self, path: str | Path) -> AuditLog:
        return AuditLog(path, run_id=self.run_id, config_hash=self.config_hash)


def create_run_context(
    config_path: str | Path,
    run_id_prefix: str,
    simulation_id: Optional[str] = None,
    run_id: Optional[str] = None,
) -> RunContext:
    path = Path(config_path)
    config_hash = compute_config_hash(path)
    started_at = datetime.now(timezone.utc)
    if run_id is None:
        stamp = started_at.strftime("%Y%m%dT%H%M%SZ")
        parts = [run_id_prefix, stamp, config_hash[:8]]
        if simulation_id:
            parts.insert(1, simulation_id)
        run_id = "-".join(parts)
    return RunContext(
        run_id=run_id,
        config_path=path,
        config_hash=config_hash,
        started_at=started_at,
        simulation_id=simulation_id,
    )
