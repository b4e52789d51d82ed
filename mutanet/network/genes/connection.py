import random
from typing import Dict, Optional


class Connection:
    """Represents a directed, weighted connection between two nodes."""
    def __init__(self, id, in_node, out_node, weight=None, enabled=True, recurrent=False, weight_range=0.1):
        self.id = id
        self.in_node = in_node
        self.out_node = out_node
        if weight is None:
            weight = 1.0 if in_node == out_node else random.uniform(-weight_range, weight_range)
        self.weight = weight
        self.enabled = enabled
        self.recurrent = recurrent

        self.gater: Optional[int] = None
        # Activation of the gater, 1 when ungated
        self.gain = 1.0

        self.eligibility = 0.0
        # Extended traces, keyed by the id of the node a gate influences
        self.xtrace: Dict[int, float] = {}

        self.previous_delta_weight = 0.0
        self.total_delta_weight = 0.0

    @property
    def is_self(self):
        return self.in_node == self.out_node

    def clear(self):
        self.eligibility = 0.0
        self.xtrace = {}
        # gain follows the gater's activation, which is cleared too
        if self.gater is not None:
            self.gain = 0.0

    def __repr__(self):
        status = "E" if self.enabled else "D"
        gate = f", g={self.gater}" if self.gater is not None else ""
        return f"Connection({self.in_node}->{self.out_node}, w={self.weight:.2f}{gate}, {status})"
