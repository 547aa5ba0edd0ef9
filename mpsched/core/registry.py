"""
mpsched/core/registry.py

ID registry for nodes, variables and edges.

Each element kind has its own running counter, so ids read as
"addition1", "addition2", "variable1", ... and never collide within a graph.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict


@dataclass
class IDRegistry:
    """
    Per-kind identifier counters scoped to one graph.

    Attributes:
        counters: Kind name -> last issued counter value
    """
    counters: Dict[str, int] = field(default_factory=dict)

    def generate(self, kind: str) -> str:
        """
        Generate a fresh identifier for an element of the given kind.

        Args:
            kind: Kind name (e.g. "Addition", "variable")

        Returns:
            Lowercased kind name followed by the kind's running counter
        """
        key = kind.lower()
        count = self.counters.get(key, 0) + 1
        self.counters[key] = count
        return f"{key}{count}"

    def peek(self, kind: str) -> int:
        """Get the last counter value issued for a kind (0 if none)."""
        return self.counters.get(kind.lower(), 0)
