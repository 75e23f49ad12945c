from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from histokit.snapshot import Snapshot


class Reporter(ABC):
    """Render histogram state for presentation."""

    @abstractmethod
    def render(self, snapshot: Snapshot, title: str) -> None:
        """Render the snapshot to the configured output."""
        raise NotImplementedError
