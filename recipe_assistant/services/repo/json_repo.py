from __future__ import annotations

import io
import json
import os
import tempfile
from contextlib import contextmanager
from typing import Any, Dict, Iterable, Iterator, List, Tuple

from pydantic.alias_generators import to_camel

from recipe_assistant.config import Settings
from recipe_assistant.core.models import Snapshot
from recipe_assistant.services.exceptions import RepoError
from recipe_assistant.services.repo.base import SnapshotRepo

# Slot name (file stem) -> Snapshot field
SLOTS: Dict[str, str] = {
    "pantry": "pantry",
    "preferences": "preferences",
    "mealplan": "meal_plan",
    "shopping": "shopping_list",
    "reviews": "reviews",
}


# Cross-platform advisory lock (fcntl on *nix, msvcrt on Windows)
@contextmanager
def _locked(path: str) -> Iterator[io.BufferedRandom]:
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    f = open(path, "a+b")  # create if missing
    try:
        import fcntl  # type: ignore
    except ImportError:
        fcntl = None
    try:
        if fcntl is not None:
            fcntl.flock(f.fileno(), fcntl.LOCK_EX)
        else:
            import msvcrt  # type: ignore
            msvcrt.locking(f.fileno(), msvcrt.LK_LOCK, 1)
    except OSError as e:
        f.close()
        raise RepoError(f"Could not lock file {path}: {e}") from e
    try:
        yield f
    finally:
        try:
            if fcntl is not None:
                fcntl.flock(f.fileno(), fcntl.LOCK_UN)
            else:
                import msvcrt  # type: ignore
                f.seek(0)
                msvcrt.locking(f.fileno(), msvcrt.LK_UNLCK, 1)
        finally:
            f.close()


def _write_temp(path: str, data: bytes) -> str:
    """Write ``data`` to a synced temp file beside ``path`` and return its name."""
    d = os.path.dirname(path) or "."
    os.makedirs(d, exist_ok=True)
    fd, tmp = tempfile.mkstemp(prefix=".tmp-", dir=d)
    try:
        with os.fdopen(fd, "wb") as w:
            w.write(data)
            w.flush()
            os.fsync(w.fileno())
    except OSError as e:
        if os.path.exists(tmp):
            os.remove(tmp)
        raise RepoError(f"Atomic write failed for {path}: {e}") from e
    return tmp


def _discard(tmps: Iterable[str]) -> None:
    for tmp in tmps:
        if os.path.exists(tmp):
            os.remove(tmp)


class JSONSnapshotRepo(SnapshotRepo):
    """One JSON file per slot under ``data_dir``."""

    def __init__(self, settings: Settings):
        self.data_dir = settings.data_dir

    def slot_path(self, slot: str) -> str:
        return os.path.join(self.data_dir, f"{slot}.json")

    def load(self) -> Snapshot:
        raw: Dict[str, Any] = {}
        for slot, field in SLOTS.items():
            path = self.slot_path(slot)
            if not os.path.exists(path):
                continue
            try:
                with _locked(path) as f:
                    f.seek(0)
                    content = f.read()
                if content:
                    raw[field] = json.loads(content.decode("utf-8"))
            except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
                raise RepoError(f"Failed to load slot '{slot}' from {path}: {e}") from e
        try:
            return Snapshot.model_validate(raw)
        except ValueError as e:
            raise RepoError(f"Stored data in {self.data_dir} does not match the snapshot schema: {e}") from e

    def save(self, snapshot: Snapshot) -> None:
        """Stage every slot in a temp file first; live files are only replaced once all are staged."""
        dumped = snapshot.model_dump(mode="json", by_alias=True)
        staged: List[Tuple[str, str]] = []
        try:
            for slot, field in SLOTS.items():
                value = dumped[to_camel(field)]
                payload = json.dumps(value, ensure_ascii=False, separators=(",", ":")).encode("utf-8")
                path = self.slot_path(slot)
                staged.append((_write_temp(path, payload), path))
        except RepoError:
            _discard(tmp for tmp, _ in staged)
            raise

        for i, (tmp, path) in enumerate(staged):
            try:
                os.replace(tmp, path)
            except OSError as e:
                _discard(t for t, _ in staged[i:])
                raise RepoError(f"Atomic write failed for {path}: {e}") from e
