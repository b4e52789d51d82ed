"""Flat, index-based records of networks.

A record refers to nodes by their position in the evaluation order, so it
is independent of the arena ids a network happens to use:

    {
        "version": 1,
        "input": 2, "output": 1, "dropout": 0.0,
        "nodes": [{"index": 0, "type": "input", "bias": 0.0,
                   "activation": "LOGISTIC", "mask": 1.0}, ...],
        "connections": [{"from": 0, "to": 2, "weight": 0.5,
                         "gater": None, "enabled": True}, ...],
    }

Readers ignore keys they don't know, and optional keys (`version`,
`dropout`, `mask`, `gater`, `enabled`) fall back to defaults.
"""

from typing import Optional

from .activation import get_activation
from .genes import NODE_TYPES
from ..config import Config
from ..errors import MalformedRecord

VERSION = 1


def to_json(network) -> dict:
    positions = network.positions()
    nodes = []
    for index, nid in enumerate(network.order):
        node = network.nodes[nid]
        nodes.append({
            "index": index,
            "type": node.type,
            "bias": node.bias,
            "activation": node.activation_type.name,
            "mask": node.mask,
        })

    connections = []
    for conn in sorted(network.connections.values(), key=lambda c: (positions[c.in_node], positions[c.out_node])):
        connections.append({
            "from": positions[conn.in_node],
            "to": positions[conn.out_node],
            "weight": conn.weight,
            "gater": positions[conn.gater] if conn.gater is not None else None,
            "enabled": conn.enabled,
        })

    return {
        "version": VERSION,
        "input": network.input_size,
        "output": network.output_size,
        "dropout": network.dropout,
        "nodes": nodes,
        "connections": connections,
    }


def _field(entry, key, what):
    try:
        return entry[key]
    except (KeyError, TypeError):
        raise MalformedRecord(f"{what} is missing '{key}'") from None


def _number(entry, key, what):
    value = _field(entry, key, what)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise MalformedRecord(f"{what} has a non-numeric '{key}'")
    return float(value)


def _check_index(value, size, what):
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value < size:
        raise MalformedRecord(f"{what} references missing node {value!r}")
    return value


def from_json(record: dict, config: Optional[Config] = None):
    """Rebuilds a network from `to_json` output.

    Raises MalformedRecord instead of returning a partially valid network.
    """
    from .network import Network

    input_size = _field(record, "input", "Record")
    output_size = _field(record, "output", "Record")
    node_entries = _field(record, "nodes", "Record")
    conn_entries = _field(record, "connections", "Record")
    if not isinstance(node_entries, list) or not isinstance(conn_entries, list):
        raise MalformedRecord("'nodes' and 'connections' must be lists")

    if not isinstance(input_size, int) or not isinstance(output_size, int) or input_size < 0 or output_size < 0:
        raise MalformedRecord("Input and output sizes must be non-negative integers")
    if input_size + output_size > len(node_entries):
        raise MalformedRecord("Record declares more inputs and outputs than nodes")

    try:
        node_entries = sorted(node_entries, key=lambda n: n["index"])
    except (KeyError, TypeError):
        raise MalformedRecord("Every node needs an integer 'index'") from None
    if [n["index"] for n in node_entries] != list(range(len(node_entries))):
        raise MalformedRecord("Node indices must run from 0 without gaps")

    size = len(node_entries)
    for i, entry in enumerate(node_entries):
        node_type = _field(entry, "type", f"Node {i}")
        if node_type not in NODE_TYPES:
            raise MalformedRecord(f"Node {i} has unknown type {node_type!r}")
        if (i < input_size) != (node_type == "input"):
            raise MalformedRecord(f"Node {i}: input nodes must come first")
        if (i >= size - output_size) != (node_type == "output"):
            raise MalformedRecord(f"Node {i}: output nodes must come last")

    network = Network(input_size, output_size, config=config, connected=False)
    network.dropout = _number(record, "dropout", "Record") if "dropout" in record else 0.0

    ids = []
    for i, entry in enumerate(node_entries):
        try:
            activation_type = get_activation(_field(entry, "activation", f"Node {i}"))
        except KeyError:
            raise MalformedRecord(f"Node {i} has unknown activation {entry['activation']!r}") from None
        bias = _number(entry, "bias", f"Node {i}")

        if i < input_size:
            nid = network.order[i]
        elif i >= size - output_size:
            nid = network.output_nodes()[i - (size - output_size)]
        else:
            nid = network.add_node(entry["type"])
        node = network.nodes[nid]
        node.bias = bias
        node.activation_type = activation_type
        node.mask = _number(entry, "mask", f"Node {i}") if "mask" in entry else 1.0
        ids.append(nid)

    gates = []
    for k, entry in enumerate(conn_entries):
        what = f"Connection {k}"
        source = _check_index(_field(entry, "from", what), size, what)
        target = _check_index(_field(entry, "to", what), size, what)
        weight = _number(entry, "weight", what)
        gater = entry.get("gater")
        if gater is not None:
            _check_index(gater, size, what)
            if gater in (source, target):
                raise MalformedRecord(f"{what} is gated by one of its own endpoints")
        if target < input_size:
            raise MalformedRecord(f"{what} feeds into input node {target}")
        if network.connection_between(ids[source], ids[target]) is not None:
            raise MalformedRecord(f"{what} duplicates {source}->{target}")

        cid = network.connect(ids[source], ids[target], weight)
        network.connections[cid].enabled = bool(entry.get("enabled", True))
        if gater is not None:
            gates.append((ids[gater], cid))

    for gater, cid in gates:
        network.gate(gater, cid)

    return network
