from __future__ import annotations

import json
import logging
import os
from datetime import datetime, timezone
from typing import Any, Optional, Dict

from recipe_assistant.config import Settings
from recipe_assistant.services.exceptions import RepoError
from recipe_assistant.services.repo.json_repo import _locked  # reuse existing cross-platform lock

logger = logging.getLogger(__name__)


class MetricsLogger:
    """Append-only JSONL logger for generation latency under the data dir.

    Writes one JSON object per line with fields:
      - ts: ISO timestamp (UTC)
      - kind: "latency"
      - name: operation name (e.g., "generate_recipes", "generate_meal_plan")
      - origin: "backend"
      - duration_ms: float
      - extra: optional dict with contextual fields (model, result count, ok)
    """

    def __init__(self, settings: Settings) -> None:
        self.path = os.path.join(settings.data_dir, settings.metrics_file)

    def log_latency(
        self,
        name: str,
        duration_ms: float,
        origin: str = "backend",
        extra: Optional[Dict[str, Any]] = None,
    ) -> None:
        entry = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "kind": "latency",
            "name": name,
            "origin": origin,
            "duration_ms": float(duration_ms),
        }
        if extra:
            entry["extra"] = extra
        line = (json.dumps(entry, ensure_ascii=False, separators=(",", ":")) + "\n").encode("utf-8")
        try:
            with _locked(self.path) as f:
                f.seek(0, os.SEEK_END)
                f.write(line)
                f.flush()
                os.fsync(f.fileno())
        except (OSError, RepoError) as e:
            # Metrics never impact user flows.
            logger.warning("Could not write latency metric %s to %s: %s", name, self.path, e)
