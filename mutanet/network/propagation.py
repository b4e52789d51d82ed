"""Per-node forward and backward steps.

Recurrent and gated connections are trained with eligibility traces and
extended traces (LSTM-g, Monner & Reggia 2012): each incoming connection
keeps a trace of its own contribution to the node's state, and for every
node whose input the owning node gates, a trace of how the connection
influences that node through the gate.

Both steps read and write the transient fields of the nodes and
connections in place, so a network must not be stepped from two threads.
"""

from typing import Dict, Optional

from .activation import ACTIVATIONS


def _self_factor(network, node) -> float:
    if node.self_connection is None:
        return 0.0
    conn = network.connections[node.self_connection]
    if not conn.enabled:
        return 0.0
    return conn.gain * conn.weight


def _self_gated_by(network, node, gater_id) -> bool:
    if node.self_connection is None:
        return False
    return network.connections[node.self_connection].gater == gater_id


def activate_node(network, node) -> float:
    """Compute a non-input node's state and activation, then refresh the
    gains it controls and the traces of its incoming connections."""
    nodes = network.nodes
    connections = network.connections

    node.old = node.state
    node.state = _self_factor(network, node) * node.state + node.bias
    for cid in node.incoming:
        conn = connections[cid]
        if conn.enabled:
            node.state += nodes[conn.in_node].activation * conn.weight * conn.gain

    squash, derivative = ACTIVATIONS[node.activation_type]
    node.activation = squash(node.state) * node.mask
    node.derivative = derivative(node.state)

    # Influence of this node on the state of every node it gates
    influences: Dict[int, float] = {}
    for cid in node.gated:
        conn = connections[cid]
        contribution = conn.weight * nodes[conn.in_node].activation
        if conn.out_node in influences:
            influences[conn.out_node] += contribution
        else:
            target = nodes[conn.out_node]
            old = target.old if _self_gated_by(network, target, node.id) else 0.0
            influences[conn.out_node] = contribution + old
        conn.gain = node.activation

    self_factor = _self_factor(network, node)
    target_factors = {nid: _self_factor(network, nodes[nid]) for nid in influences}
    for cid in node.incoming:
        conn = connections[cid]
        if not conn.enabled:
            continue
        conn.eligibility = self_factor * conn.eligibility + nodes[conn.in_node].activation * conn.gain
        for nid, influence in influences.items():
            value = node.derivative * conn.eligibility * influence
            if nid in conn.xtrace:
                conn.xtrace[nid] = target_factors[nid] * conn.xtrace[nid] + value
            else:
                # new gate since the last step, e.g. through mutation
                conn.xtrace[nid] = value

    return node.activation


def propagate_node(network, node, rate: float, momentum: float, update: bool, target: Optional[float] = None):
    """Compute a node's error responsibility and adjust its incoming
    weights and bias. Output nodes take their error from `target`."""
    nodes = network.nodes
    connections = network.connections

    if node.type == "output":
        error = target - node.activation
        if network.config.scale_output_error:
            error *= node.derivative
        node.error_responsibility = node.error_projected = error
    else:
        error = 0.0
        for cid in node.outgoing:
            conn = connections[cid]
            if conn.enabled:
                error += nodes[conn.out_node].error_responsibility * conn.weight * conn.gain
        node.error_projected = node.derivative * error

        error = 0.0
        for cid in node.gated:
            conn = connections[cid]
            downstream = nodes[conn.out_node]
            influence = downstream.old if _self_gated_by(network, downstream, node.id) else 0.0
            influence += conn.weight * nodes[conn.in_node].activation
            error += downstream.error_responsibility * influence
        node.error_gated = node.derivative * error

        node.error_responsibility = node.error_projected + node.error_gated

    if node.type == "constant":
        return

    for cid in node.incoming:
        conn = connections[cid]
        if not conn.enabled:
            continue
        gradient = node.error_projected * conn.eligibility
        for nid, value in conn.xtrace.items():
            gradient += nodes[nid].error_responsibility * value

        conn.total_delta_weight += rate * gradient * node.mask
        if update:
            conn.total_delta_weight += momentum * conn.previous_delta_weight
            conn.weight += conn.total_delta_weight
            conn.previous_delta_weight = conn.total_delta_weight
            conn.total_delta_weight = 0.0

    node.total_delta_bias += rate * node.error_responsibility
    if update:
        node.total_delta_bias += momentum * node.previous_delta_bias
        node.bias += node.total_delta_bias
        node.previous_delta_bias = node.total_delta_bias
        node.total_delta_bias = 0.0
