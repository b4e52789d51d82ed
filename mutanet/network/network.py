import copy
import logging
import math
import random
from typing import Dict, List, Optional, Sequence

from .activation import Activation, get_activation
from .genes import Connection, Node
from .propagation import activate_node, propagate_node
from ..errors import ShapeMismatch
from ..config import Config

logger = logging.getLogger(__name__)


class Network:
    """A mutable neural network: an arena of nodes and connections plus the
    order in which nodes are evaluated.

    Nodes and connections are addressed by integer ids that stay stable for
    the lifetime of the network. `order` holds node ids with all inputs
    first and all outputs last; a connection that points backwards in it is
    tagged `recurrent` and reads the previous step's activation.
    """
    def __init__(self, input_size: int, output_size: int, config: Optional[Config] = None, connected: bool = True):
        if input_size < 0 or output_size < 0:
            raise ValueError("Input and output sizes must be non-negative")
        self.config = config if config is not None else Config()
        self.input_size = input_size
        self.output_size = output_size
        self.nodes: Dict[int, Node] = {}
        self.connections: Dict[int, Connection] = {}
        self.order: List[int] = []
        self.node_idx = 0
        self.connection_idx = 0
        self.dropout = 0.0
        self.score: Optional[float] = None
        # (in_node, out_node) -> connection id
        self._pairs: Dict[tuple, int] = {}

        for _ in range(input_size):
            self._create_node("input", len(self.order))
        for _ in range(output_size):
            self._create_node("output", len(self.order))

        if connected:
            for in_id in self.order[:input_size]:
                for out_id in self.order[input_size:]:
                    weight = random.random() * input_size * math.sqrt(2 / input_size)
                    self.connect(in_id, out_id, weight)

    # --- construction ---
    def _create_node(self, node_type, position, bias=None, activation_type=None) -> int:
        node = Node(
            self.node_idx,
            node_type=node_type,
            bias=bias,
            activation_type=get_activation(activation_type) if activation_type is not None else Activation.LOGISTIC,
            bias_range=self.config.bias_init_range,
        )
        self.nodes[node.id] = node
        self.order.insert(position, node.id)
        self.node_idx += 1
        return node.id

    def add_node(self, node_type: str = "hidden", bias=None, activation_type=None, position: Optional[int] = None) -> int:
        """Adds a node and returns its id.

        Hidden and constant nodes go right before the outputs unless a
        position is given; the position must keep inputs first and outputs
        last.
        """
        if node_type == "input":
            if position is not None and position != self.input_size:
                raise ValueError("Input nodes are appended after the existing inputs")
            self.input_size += 1
            return self._create_node(node_type, self.input_size - 1, bias, activation_type)
        if node_type == "output":
            if position is not None and position != len(self.order):
                raise ValueError("Output nodes are appended after the existing outputs")
            self.output_size += 1
            return self._create_node(node_type, len(self.order), bias, activation_type)

        last = len(self.order) - self.output_size
        if position is None:
            position = last
        if not self.input_size <= position <= last:
            raise ValueError(f"Hidden nodes must sit between positions {self.input_size} and {last}")
        return self._create_node(node_type, position, bias, activation_type)

    def connect(self, in_node: int, out_node: int, weight: Optional[float] = None) -> int:
        """Connects two nodes and returns the connection id.

        Connecting a node to itself creates its self connection. A
        connection pointing backwards in the evaluation order is tagged
        recurrent.
        """
        if in_node not in self.nodes or out_node not in self.nodes:
            raise KeyError(f"Unknown node in connection {in_node}->{out_node}")
        if self.nodes[out_node].type == "input":
            raise ValueError("Input nodes can't receive connections")
        if (in_node, out_node) in self._pairs:
            raise ValueError(f"Nodes {in_node}->{out_node} are already connected")

        recurrent = in_node == out_node or self.position(in_node) > self.position(out_node)
        conn = Connection(
            self.connection_idx, in_node, out_node,
            weight=weight, recurrent=recurrent, weight_range=self.config.weight_init_range,
        )
        self.connections[conn.id] = conn
        self._pairs[(in_node, out_node)] = conn.id
        self.connection_idx += 1

        if conn.is_self:
            self.nodes[in_node].self_connection = conn.id
        else:
            self.nodes[in_node].outgoing.append(conn.id)
            self.nodes[out_node].incoming.append(conn.id)
        return conn.id

    def disconnect(self, in_node: int, out_node: int):
        """Removes the connection between two nodes, including its gate."""
        cid = self._pairs.get((in_node, out_node))
        if cid is None:
            raise KeyError(f"No connection {in_node}->{out_node}")
        self.remove_connection(cid)

    def remove_connection(self, connection_id: int):
        conn = self.connections[connection_id]
        if conn.gater is not None:
            self.ungate(connection_id)
        if conn.is_self:
            self.nodes[conn.in_node].self_connection = None
        else:
            self.nodes[conn.in_node].outgoing.remove(conn.id)
            self.nodes[conn.out_node].incoming.remove(conn.id)
        del self._pairs[(conn.in_node, conn.out_node)]
        del self.connections[connection_id]

    def gate(self, gater: int, connection_id: int):
        """Lets `gater`'s activation scale a connection's weight."""
        if gater not in self.nodes:
            raise KeyError(f"Unknown gater node {gater}")
        conn = self.connections[connection_id]
        if gater in (conn.in_node, conn.out_node):
            raise ValueError("A connection can't be gated by one of its own endpoints")
        if conn.gater is not None:
            self.warn(f"Connection {conn.in_node}->{conn.out_node} is already gated")
            return
        conn.gater = gater
        conn.gain = self.nodes[gater].activation
        self.nodes[gater].gated.append(conn.id)

    def ungate(self, connection_id: int):
        conn = self.connections[connection_id]
        if conn.gater is None:
            raise ValueError(f"Connection {conn.in_node}->{conn.out_node} is not gated")
        self.nodes[conn.gater].gated.remove(conn.id)
        conn.gater = None
        conn.gain = 1.0

    def remove_node(self, node_id: int):
        """Removes a hidden node and bridges its predecessors to its successors.

        Every connection, gate and trace referencing the node goes with it.
        With `config.keep_gates`, gates carried by the removed connections are
        moved onto randomly chosen bridging connections.
        """
        node = self.nodes[node_id]
        if node.type in ("input", "output"):
            raise ValueError("Only hidden and constant nodes can be removed")

        if node.self_connection is not None:
            self.remove_connection(node.self_connection)

        gaters = []
        inputs = []
        for cid in list(node.incoming):
            conn = self.connections[cid]
            if self.config.keep_gates and conn.gater is not None:
                gaters.append(conn.gater)
            inputs.append(conn.in_node)
            self.remove_connection(cid)

        outputs = []
        for cid in list(node.outgoing):
            conn = self.connections[cid]
            if self.config.keep_gates and conn.gater is not None:
                gaters.append(conn.gater)
            outputs.append(conn.out_node)
            self.remove_connection(cid)

        # Bypass connections
        bridges = []
        for in_id in inputs:
            for out_id in outputs:
                if (in_id, out_id) not in self._pairs:
                    bridges.append(self.connect(in_id, out_id))

        for gater in gaters:
            candidates = [
                cid for cid in bridges
                if gater not in (self.connections[cid].in_node, self.connections[cid].out_node)
            ]
            if not candidates:
                continue
            cid = random.choice(candidates)
            self.gate(gater, cid)
            bridges.remove(cid)

        for cid in list(node.gated):
            self.ungate(cid)

        for conn in self.connections.values():
            conn.xtrace.pop(node_id, None)

        self.order.remove(node_id)
        del self.nodes[node_id]

    def set(self, bias: Optional[float] = None, activation_type=None):
        """Sets the bias and/or activation of every non-input node."""
        for node in self.nodes.values():
            if node.type == "input":
                continue
            if bias is not None:
                node.bias = bias
            if activation_type is not None:
                node.activation_type = get_activation(activation_type)

    def clear(self):
        """Resets all transient state, as before the first activation."""
        for node in self.nodes.values():
            node.clear()
        for conn in self.connections.values():
            conn.clear()

    # --- queries ---
    def position(self, node_id: int) -> int:
        return self.order.index(node_id)

    def positions(self) -> Dict[int, int]:
        return {nid: i for i, nid in enumerate(self.order)}

    def input_nodes(self) -> List[int]:
        return self.order[:self.input_size]

    def output_nodes(self) -> List[int]:
        return self.order[len(self.order) - self.output_size:]

    def hidden_nodes(self) -> List[int]:
        return self.order[self.input_size:len(self.order) - self.output_size]

    def connection_between(self, in_node: int, out_node: int) -> Optional[Connection]:
        cid = self._pairs.get((in_node, out_node))
        return self.connections[cid] if cid is not None else None

    def feed_forward_violations(self) -> List[Connection]:
        """Connections that are neither recurrent, self nor gated yet point
        backwards in the evaluation order."""
        positions = self.positions()
        return [
            conn for conn in self.connections.values()
            if not conn.recurrent and not conn.is_self and conn.gater is None
            and positions[conn.in_node] >= positions[conn.out_node]
        ]

    def is_feed_forward(self) -> bool:
        return not self.feed_forward_violations()

    def warn(self, message: str):
        logger.log(logging.WARNING if self.config.warnings else logging.DEBUG, message)

    # --- computation ---
    def activate(self, input: Sequence[float], training: bool = False) -> List[float]:
        """Runs one forward pass and returns the output activations."""
        if len(input) != self.input_size:
            raise ShapeMismatch(f"Expected {self.input_size} inputs, got {len(input)}")

        output = []
        for position, node_id in enumerate(self.order):
            node = self.nodes[node_id]
            if node.type == "input":
                node.activation = input[position]
                for cid in node.gated:
                    self.connections[cid].gain = node.activation
                continue
            if training and node.type in ("hidden", "constant"):
                node.mask = 0.0 if random.random() < self.dropout else 1.0
            value = activate_node(self, node)
            if node.type == "output":
                output.append(value)
        return output

    def propagate(self, target: Sequence[float], rate: float = 0.3, momentum: float = 0.0, update: bool = True):
        """Backpropagates the error against `target` for the last activation.

        With `update=False` weight changes are accumulated and applied on the
        next call that updates.

        Output responsibility is `target - activation`. Setting
        `config.scale_output_error` multiplies it by the squash derivative,
        which trains noticeably slower: AND and XOR then miss an error of
        0.002 within 1000 and 2000 iterations.
        """
        if len(target) != self.output_size:
            raise ShapeMismatch(f"Expected {self.output_size} targets, got {len(target)}")

        for node_id, value in zip(reversed(self.output_nodes()), reversed(target)):
            propagate_node(self, self.nodes[node_id], rate, momentum, update, value)
        for node_id in reversed(self.hidden_nodes()):
            propagate_node(self, self.nodes[node_id], rate, momentum, update)

    def train(self, dataset, options=None, **overrides):
        from ..training import train
        return train(self, dataset, options, **overrides)

    def test(self, dataset, cost=None):
        from ..training import test
        return test(self, dataset, cost)

    # --- evolution ---
    def mutate(self, method) -> bool:
        """Applies one mutation operator in place. Returns False when the
        operator had nothing to act on."""
        from .mutation import mutate
        return mutate(self, method)

    @staticmethod
    def cross_over(parent1: "Network", parent2: "Network", equal: bool = False) -> "Network":
        from .crossover import cross_over
        return cross_over(parent1, parent2, equal)

    def clone(self) -> "Network":
        return copy.deepcopy(self)

    # --- serialization ---
    def to_json(self) -> dict:
        from .serialization import to_json
        return to_json(self)

    @staticmethod
    def from_json(record: dict, config: Optional[Config] = None) -> "Network":
        from .serialization import from_json
        return from_json(record, config)

    def __repr__(self):
        return (
            f"Network(input={self.input_size}, output={self.output_size}, "
            f"nodes={len(self.nodes)}, connections={len(self.connections)})"
        )
