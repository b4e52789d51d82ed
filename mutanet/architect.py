"""Topology presets.

Every preset assembles its network through the public construction
interface (`add_node`, `connect`, `gate`) or through mutations, so anything
built here can equally be built by hand.
"""

from typing import List, Optional

from .config import Config
from .network import Mutation, Network


def _connect_all(network: Network, sources: List[int], targets: List[int]) -> List[int]:
    return [network.connect(s, t) for s in sources for t in targets]


def _gate_inputs(network: Network, gaters: List[int], connections: List[int]):
    """Gates each target's incoming connections from `connections` with the
    gater at the same position as the target."""
    targets = []
    for cid in connections:
        out_node = network.connections[cid].out_node
        if out_node not in targets:
            targets.append(out_node)
    for i, target in enumerate(targets):
        gater = gaters[i % len(gaters)]
        for cid in connections:
            if network.connections[cid].out_node == target:
                network.gate(gater, cid)


def _gate_outputs(network: Network, gaters: List[int], connections: List[int]):
    """Gates each source's outgoing connections from `connections` with the
    gater at the same position as the source."""
    sources = []
    for cid in connections:
        in_node = network.connections[cid].in_node
        if in_node not in sources:
            sources.append(in_node)
    for i, source in enumerate(sources):
        gater = gaters[i % len(gaters)]
        for cid in connections:
            if network.connections[cid].in_node == source:
                network.gate(gater, cid)


def perceptron(*layers: int, config: Optional[Config] = None) -> Network:
    """Multilayer perceptron with fully connected consecutive layers, e.g.
    `perceptron(2, 4, 1)`."""
    if len(layers) < 3:
        raise ValueError("A perceptron needs an input, at least one hidden and an output layer")

    network = Network(layers[0], layers[-1], config=config, connected=False)
    previous = network.input_nodes()
    for size in layers[1:-1]:
        layer = [network.add_node() for _ in range(size)]
        _connect_all(network, previous, layer)
        previous = layer
    _connect_all(network, previous, network.output_nodes())
    return network


def lstm(
    input_size: int,
    *sizes: int,
    memory_to_memory: bool = False,
    output_to_memory: bool = False,
    output_to_gates: bool = False,
    input_to_output: bool = True,
    input_to_deep: bool = True,
    config: Optional[Config] = None,
) -> Network:
    """Long short-term memory network: `lstm(input, *blocks, output)`.

    Each block has input, forget and output gates around its memory cells.
    The memory cells keep their state through a self connection gated by
    the forget gate and feed the gates back recurrently.
    """
    if len(sizes) < 2:
        raise ValueError("An LSTM needs an input, at least one memory block and an output layer")
    blocks, output_size = sizes[:-1], sizes[-1]

    network = Network(input_size, output_size, config=config, connected=False)
    inputs = network.input_nodes()
    outputs = network.output_nodes()

    previous = inputs
    for i, size in enumerate(blocks):
        last = i == len(blocks) - 1

        # Activation order
        input_gate = [network.add_node(bias=1.0) for _ in range(size)]
        forget_gate = [network.add_node(bias=1.0) for _ in range(size)]
        memory_cell = [network.add_node() for _ in range(size)]
        output_gate = [network.add_node(bias=1.0) for _ in range(size)]
        output_block = outputs if last else [network.add_node() for _ in range(size)]

        cell_inputs = _connect_all(network, previous, memory_cell)
        _connect_all(network, previous, input_gate)
        _connect_all(network, previous, output_gate)
        _connect_all(network, previous, forget_gate)

        _connect_all(network, memory_cell, input_gate)
        _connect_all(network, memory_cell, forget_gate)
        _connect_all(network, memory_cell, output_gate)
        forget = [network.connect(cell, cell) for cell in memory_cell]
        cell_outputs = _connect_all(network, memory_cell, output_block)

        _gate_inputs(network, input_gate, cell_inputs)
        for gater, cid in zip(forget_gate, forget):
            network.gate(gater, cid)
        _gate_outputs(network, output_gate, cell_outputs)

        if input_to_deep and i > 0:
            _gate_inputs(network, input_gate, _connect_all(network, inputs, memory_cell))

        if memory_to_memory:
            lateral = [network.connect(a, b) for a in memory_cell for b in memory_cell if a != b]
            _gate_inputs(network, input_gate, lateral)

        if output_to_memory:
            _gate_inputs(network, input_gate, _connect_all(network, outputs, memory_cell))

        if output_to_gates:
            _connect_all(network, outputs, input_gate)
            _connect_all(network, outputs, forget_gate)
            _connect_all(network, outputs, output_gate)

        previous = output_block

    if input_to_output:
        _connect_all(network, inputs, outputs)
    return network


def random_network(
    input_size: int,
    hidden: int,
    output_size: int,
    connections: Optional[int] = None,
    back_connections: int = 0,
    self_connections: int = 0,
    gates: int = 0,
    config: Optional[Config] = None,
) -> Network:
    """Grows a random network from a fully connected one by mutation."""
    if connections is None:
        connections = hidden * 2

    network = Network(input_size, output_size, config=config)
    for _ in range(hidden):
        network.mutate(Mutation.ADD_NODE)
    for _ in range(connections - hidden):
        network.mutate(Mutation.ADD_CONN)
    for _ in range(back_connections):
        network.mutate(Mutation.ADD_BACK_CONN)
    for _ in range(self_connections):
        network.mutate(Mutation.ADD_SELF_CONN)
    for _ in range(gates):
        network.mutate(Mutation.ADD_GATE)
    return network
