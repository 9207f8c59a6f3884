# flowmigrate/utils/ids.py
from __future__ import annotations

import hashlib
import random
import uuid
from typing import Optional, Set

from flowmigrate.config import ConversionOptions

TRIGGER_NODE_ID = "triggerNode_1"

_ID_NAMESPACE = uuid.uuid5(uuid.NAMESPACE_URL, "flowmigrate/lamatic")


def _digest(*parts: str) -> int:
    h = hashlib.sha1("\x00".join(parts).encode("utf-8")).hexdigest()
    return int(h[:12], 16)


class IdFactory:
    """
    Issues every identifier a single conversion needs.

    One factory per convert() call: it remembers the node IDs it handed out so
    two nodes can never share an ID, and the reserved trigger ID is never
    produced by node_id().
    """

    def __init__(self, options: Optional[ConversionOptions] = None):
        self.options = options or ConversionOptions()
        self.deterministic = self.options.id_strategy == "deterministic"
        self._rng = random.Random(self.options.seed)
        self._issued: Set[str] = {TRIGGER_NODE_ID}

    def node_id(self, name: str, target_type: str) -> str:
        """`<targetType>_<n>`, n in [0, 1000) unless that range is exhausted."""
        if self.deterministic:
            n = _digest(target_type, name) % 1000
        else:
            n = self._rng.randrange(1000)
        candidate = f"{target_type}_{n}"
        while candidate in self._issued:
            n += 1
            candidate = f"{target_type}_{n}"
        self._issued.add(candidate)
        return candidate

    def prompt_id(self, scope: str, index: int) -> str:
        """UUID for one prompt message of a node (scope is the owning node ID)."""
        if self.deterministic:
            return str(uuid.uuid5(_ID_NAMESPACE, f"{scope}:prompt:{index}"))
        return str(uuid.UUID(int=self._rng.getrandbits(128), version=4))

    def placeholder(self, scope: str, index: int) -> str:
        """Downstream slot reference for a branch output that has no node yet."""
        if self.deterministic:
            n = _digest(scope, "branch", str(index)) % 1_000_000
        else:
            n = self._rng.randrange(1_000_000)
        return f"plus-node-addNode_{n}"
