"""Configuration system for lazytreelib.

This module defines how users tune a TreeStore: the level tag sequence
assigned to new nodes, how identifiers are generated, how many fetches
may run at once and how silent no-op mutations should be.
"""

from dataclasses import dataclass
from typing import List, Sequence, Tuple


# Original depth tags: root is "A", its children "B", and so on.
DEFAULT_LEVELS: Tuple[str, ...] = ("A", "B", "C", "D", "E", "F", "G", "H")


@dataclass
class StoreConfig:
    """Complete configuration for a TreeStore.

    The defaults reproduce the behaviour described for the engine: eight
    level tags, ``node-101``-style identifiers and silent no-ops for
    missing ids or disallowed moves.
    """

    # Depth tags, shallowest first; the last one is reused for deeper nodes
    levels: Sequence[str] = DEFAULT_LEVELS

    # Identifier generation (used when no generator is injected)
    id_prefix: str = "node-"
    id_start: int = 100

    # Repository concurrency
    max_concurrent_fetches: int = 100

    # Error reporting
    strict: bool = False    # Raise instead of silently returning the old tree
    verbose: bool = False   # Log every no-op at INFO instead of DEBUG

    def __post_init__(self):
        self.levels = tuple(self.levels)

    def level_for_depth(self, depth: int) -> str:
        """Return the level tag for a node created at ``depth``.

        Depths beyond the last defined tag are clamped to it.

        Args:
            depth: Structural depth of the new node (root = 0)

        Returns:
            Level tag string
        """
        if depth < 0:
            depth = 0
        return self.levels[min(depth, len(self.levels) - 1)]

    @classmethod
    def default(cls) -> 'StoreConfig':
        """Create the default configuration."""
        return cls()

    @classmethod
    def strict_mode(cls, **overrides) -> 'StoreConfig':
        """Create a config that raises on NotFound / InvalidOperation.

        Args:
            **overrides: Any other StoreConfig field

        Returns:
            StoreConfig with ``strict=True``
        """
        return cls(strict=True, **overrides)

    def validate(self) -> List[str]:
        """Validate configuration for consistency.

        Returns:
            List of validation errors (empty if valid)
        """
        errors = []

        if not self.levels:
            errors.append("levels cannot be empty")
        elif any(not isinstance(level, str) or not level for level in self.levels):
            errors.append("levels must be non-empty strings")

        if self.id_start < 0:
            errors.append("id_start cannot be negative")

        if self.max_concurrent_fetches <= 0:
            errors.append("max_concurrent_fetches must be positive")

        return errors
