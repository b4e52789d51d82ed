import random
from typing import List, Optional

from ..activation import Activation

NODE_TYPES = ("input", "hidden", "output", "constant")


class Node:
    """An activation unit of a network.

    Connections are owned by the network; a node only keeps the ids of its
    incident connections for traversal.
    """
    def __init__(self, id, node_type="hidden", bias=None, activation_type=Activation.LOGISTIC, bias_range=0.1):
        if node_type not in NODE_TYPES:
            raise ValueError(f"Unknown node type: {node_type}")
        self.id = id
        self.type = node_type
        if bias is None:
            bias = 0.0 if node_type == "input" else random.uniform(-bias_range, bias_range)
        self.bias = bias
        self.activation_type = activation_type

        # Per-step state
        self.state = 0.0
        self.old = 0.0
        self.activation = 0.0
        self.derivative = 0.0
        self.mask = 1.0

        self.error_responsibility = 0.0
        self.error_projected = 0.0
        self.error_gated = 0.0

        self.previous_delta_bias = 0.0
        self.total_delta_bias = 0.0

        # Connection ids
        self.incoming: List[int] = []
        self.outgoing: List[int] = []
        self.gated: List[int] = []
        self.self_connection: Optional[int] = None

    def clear(self):
        self.state = 0.0
        self.old = 0.0
        self.activation = 0.0
        self.error_responsibility = 0.0
        self.error_projected = 0.0
        self.error_gated = 0.0

    def __repr__(self):
        return f"Node(id={self.id}, type='{self.type}', bias={self.bias:.2f}, {self.activation_type.name})"
