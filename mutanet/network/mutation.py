"""Structural and parametric mutation operators.

Every operator edits a network in place and keeps its invariants: new
forward connections respect the evaluation order, backward ones are tagged
recurrent, and nothing references a removed node. An operator that finds
nothing to act on raises `InvalidMutation`, which `mutate` turns into a
no-op.
"""

import logging
import random
from enum import Enum
from typing import Callable, Dict

from .activation import Activation
from ..errors import InvalidMutation

logger = logging.getLogger(__name__)


class Mutation(Enum):
    ADD_NODE = "ADD_NODE"
    SUB_NODE = "SUB_NODE"
    ADD_CONN = "ADD_CONN"
    SUB_CONN = "SUB_CONN"
    MOD_WEIGHT = "MOD_WEIGHT"
    MOD_BIAS = "MOD_BIAS"
    MOD_ACTIVATION = "MOD_ACTIVATION"
    ADD_SELF_CONN = "ADD_SELF_CONN"
    SUB_SELF_CONN = "SUB_SELF_CONN"
    ADD_GATE = "ADD_GATE"
    SUB_GATE = "SUB_GATE"
    ADD_BACK_CONN = "ADD_BACK_CONN"
    SUB_BACK_CONN = "SUB_BACK_CONN"
    SWAP_NODES = "SWAP_NODES"


ALL = list(Mutation)

# Operators that never introduce recurrence
FFW = [
    Mutation.ADD_NODE,
    Mutation.SUB_NODE,
    Mutation.ADD_CONN,
    Mutation.SUB_CONN,
    Mutation.MOD_WEIGHT,
    Mutation.MOD_BIAS,
    Mutation.MOD_ACTIVATION,
    Mutation.SWAP_NODES,
]


def _mutable_nodes(network, include_output=True):
    """Ids of nodes that carry a bias and an activation function."""
    nodes = network.order[network.input_size:]
    if not include_output:
        nodes = nodes[:len(nodes) - network.output_size]
    return nodes


def _allowed_activations(network):
    allowed = network.config.allowed_activations
    return list(allowed) if allowed is not None else list(Activation)


def add_node(network):
    """Splits a random connection with a new hidden node."""
    candidates = [c for c in network.connections.values() if c.enabled and not c.is_self]
    if not candidates:
        raise InvalidMutation("No connection to split")

    conn = random.choice(candidates)
    in_node, out_node, weight, gater = conn.in_node, conn.out_node, conn.weight, conn.gater
    network.remove_connection(conn.id)

    position = min(network.position(out_node), len(network.order) - network.output_size)
    node_id = network.add_node("hidden", activation_type=random.choice(_allowed_activations(network)), position=position)

    # Incoming half passes the signal through, outgoing half keeps its weight
    conn1 = network.connect(in_node, node_id, 1.0)
    conn2 = network.connect(node_id, out_node, weight)

    if gater is not None:
        network.gate(gater, conn1 if random.random() >= 0.5 else conn2)


def sub_node(network):
    """Removes a random hidden node and bridges around it."""
    hidden = network.hidden_nodes()
    if not hidden:
        raise InvalidMutation("No hidden nodes left to remove")
    network.remove_node(random.choice(hidden))


def add_conn(network):
    """Adds a random missing forward connection."""
    order = network.order
    available = [
        (order[i], order[j])
        for i in range(len(order) - network.output_size)
        for j in range(max(i + 1, network.input_size), len(order))
        if network.connection_between(order[i], order[j]) is None
    ]
    if not available:
        raise InvalidMutation("No more forward connections to make")
    in_node, out_node = random.choice(available)
    network.connect(in_node, out_node)


def sub_conn(network):
    """Removes a random forward connection.

    The endpoints may be left without connections; a node without inputs
    then outputs the squash of its bias.
    """
    candidates = [c for c in network.connections.values() if not c.recurrent and not c.is_self]
    if not candidates:
        raise InvalidMutation("No connections to remove")
    network.remove_connection(random.choice(candidates).id)


def mod_weight(network):
    if not network.connections:
        raise InvalidMutation("No connections to modify")
    conn = random.choice(list(network.connections.values()))
    conn.weight += random.uniform(network.config.mod_weight_min, network.config.mod_weight_max)


def mod_bias(network):
    nodes = _mutable_nodes(network)
    if not nodes:
        raise InvalidMutation("No nodes with a bias")
    node = network.nodes[random.choice(nodes)]
    node.bias += random.uniform(network.config.mod_bias_min, network.config.mod_bias_max)


def mod_activation(network):
    """Gives a random node a different activation function."""
    nodes = _mutable_nodes(network, include_output=network.config.mutate_output)
    if not nodes:
        raise InvalidMutation("No nodes to change the activation of")
    node = network.nodes[random.choice(nodes)]
    options = [a for a in _allowed_activations(network) if a != node.activation_type]
    if not options:
        raise InvalidMutation("No alternative activation allowed")
    node.activation_type = random.choice(options)


def add_self_conn(network):
    candidates = [nid for nid in _mutable_nodes(network) if network.nodes[nid].self_connection is None]
    if not candidates:
        raise InvalidMutation("No more self connections to add")
    node_id = random.choice(candidates)
    network.connect(node_id, node_id)


def sub_self_conn(network):
    candidates = [c for c in network.connections.values() if c.is_self]
    if not candidates:
        raise InvalidMutation("No self connections to remove")
    network.remove_connection(random.choice(candidates).id)


def add_gate(network):
    """Gates a random ungated connection with a random non-input node."""
    mutable = _mutable_nodes(network)
    candidates = [
        (conn, [nid for nid in mutable if nid not in (conn.in_node, conn.out_node)])
        for conn in network.connections.values() if conn.gater is None
    ]
    candidates = [(conn, gaters) for conn, gaters in candidates if gaters]
    if not candidates:
        raise InvalidMutation("No connections to gate")
    conn, gaters = random.choice(candidates)
    network.gate(random.choice(gaters), conn.id)


def sub_gate(network):
    candidates = [c for c in network.connections.values() if c.gater is not None]
    if not candidates:
        raise InvalidMutation("No gates to remove")
    network.ungate(random.choice(candidates).id)


def add_back_conn(network):
    """Adds a random missing backward connection between non-input nodes."""
    order = network.order
    available = [
        (order[i], order[j])
        for i in range(network.input_size, len(order))
        for j in range(network.input_size, i)
        if network.connection_between(order[i], order[j]) is None
    ]
    if not available:
        raise InvalidMutation("No more backward connections to make")
    in_node, out_node = random.choice(available)
    network.connect(in_node, out_node)


def sub_back_conn(network):
    candidates = [c for c in network.connections.values() if c.recurrent and not c.is_self]
    if not candidates:
        raise InvalidMutation("No backward connections to remove")
    network.remove_connection(random.choice(candidates).id)


def swap_nodes(network):
    """Swaps the bias and activation function of two random nodes."""
    nodes = _mutable_nodes(network, include_output=network.config.mutate_output)
    if len(nodes) < 2:
        raise InvalidMutation("Not enough nodes to swap")
    first, second = (network.nodes[nid] for nid in random.sample(nodes, 2))
    first.bias, second.bias = second.bias, first.bias
    first.activation_type, second.activation_type = second.activation_type, first.activation_type


OPERATORS: Dict[Mutation, Callable] = {
    Mutation.ADD_NODE: add_node,
    Mutation.SUB_NODE: sub_node,
    Mutation.ADD_CONN: add_conn,
    Mutation.SUB_CONN: sub_conn,
    Mutation.MOD_WEIGHT: mod_weight,
    Mutation.MOD_BIAS: mod_bias,
    Mutation.MOD_ACTIVATION: mod_activation,
    Mutation.ADD_SELF_CONN: add_self_conn,
    Mutation.SUB_SELF_CONN: sub_self_conn,
    Mutation.ADD_GATE: add_gate,
    Mutation.SUB_GATE: sub_gate,
    Mutation.ADD_BACK_CONN: add_back_conn,
    Mutation.SUB_BACK_CONN: sub_back_conn,
    Mutation.SWAP_NODES: swap_nodes,
}


def mutate(network, method) -> bool:
    """Applies `method` (a `Mutation` or its name) to `network` in place.

    Returns False, without touching the network, when the operator's
    precondition is not met.
    """
    if not isinstance(method, Mutation):
        method = Mutation[str(method).upper()]
    try:
        OPERATORS[method](network)
    except InvalidMutation as e:
        network.warn(f"{method.name} skipped: {e}")
        return False
    return True
