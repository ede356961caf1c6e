from __future__ import annotations
from abc import ABC, abstractmethod
from recipe_assistant.core.models import Snapshot


class SnapshotRepo(ABC):
    """Whole-snapshot store: read everything on start, write everything on change."""

    @abstractmethod
    def load(self) -> Snapshot: ...
    @abstractmethod
    def save(self, snapshot: Snapshot) -> None: ...
