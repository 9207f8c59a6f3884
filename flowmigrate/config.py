# flowmigrate/config.py
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

ID_STRATEGIES = ("deterministic", "random")
DEFAULT_ID_STRATEGY = "deterministic"

ID_STRATEGY_ENV = "FLOWMIGRATE_ID_STRATEGY"
SEED_ENV = "FLOWMIGRATE_SEED"


def parse_seed(value: Optional[str]) -> Optional[int]:
    """Empty / unset -> None; anything else must be an integer."""
    if value is None or not str(value).strip():
        return None
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"Seed must be an integer, got '{value}'") from None


@dataclass(frozen=True)
class ConversionOptions:
    """
    Per-call conversion knobs.

    id_strategy:
      - "deterministic": node / prompt / placeholder IDs are hashes of the node
        name and target type, so re-converting the same export gives the same IDs
      - "random": fresh random suffixes on every call (still consistent within a call)
    seed: only used by the random strategy, makes it reproducible for debugging
    """
    id_strategy: str = DEFAULT_ID_STRATEGY
    seed: Optional[int] = None

    def __post_init__(self):
        if self.id_strategy not in ID_STRATEGIES:
            raise ValueError(
                f"Unknown id strategy '{self.id_strategy}'. "
                f"Choose one of: {', '.join(ID_STRATEGIES)}"
            )

    @classmethod
    def from_env(cls) -> "ConversionOptions":
        """Build options from FLOWMIGRATE_ID_STRATEGY / FLOWMIGRATE_SEED."""
        strategy = os.getenv(ID_STRATEGY_ENV, DEFAULT_ID_STRATEGY).strip().lower()
        return cls(id_strategy=strategy, seed=parse_seed(os.getenv(SEED_ENV)))
