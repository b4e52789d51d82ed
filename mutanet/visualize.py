from typing import Dict

import matplotlib.pyplot as plt
import networkx as nx

from .network import Network


def layers(network: Network) -> Dict[int, int]:
    """Assigns each node a layer: inputs sit at 0 and every forward
    connection pushes its target one layer past its source. Outputs share
    the last layer."""
    layer = {nid: 0 for nid in network.order}
    positions = network.positions()
    # Walking the evaluation order settles every forward edge in one pass
    for nid in network.order:
        for cid in network.nodes[nid].outgoing:
            conn = network.connections[cid]
            if conn.enabled and positions[conn.out_node] > positions[nid]:
                layer[conn.out_node] = max(layer[conn.out_node], layer[nid] + 1)

    outputs = network.output_nodes()
    if outputs:
        last = max(max(layer.values()), 1)
        for nid in outputs:
            layer[nid] = last
    return layer


def to_networkx(network: Network) -> nx.DiGraph:
    """Exports the network as a directed graph keyed by node id."""
    G = nx.DiGraph()
    node_layers = layers(network)
    for position, nid in enumerate(network.order):
        node = network.nodes[nid]
        G.add_node(
            nid,
            type=node.type,
            bias=node.bias,
            activation=node.activation_type.name,
            position=position,
            layer=node_layers[nid],
        )
    for conn in network.connections.values():
        G.add_edge(
            conn.in_node,
            conn.out_node,
            weight=conn.weight,
            gater=conn.gater,
            recurrent=conn.recurrent,
            enabled=conn.enabled,
        )
    return G


def draw_network(network: Network, ax=None):
    """
    Visualize a Network as a directed graph.
    Inputs = green, hidden = blue, outputs = red.
    Forward edges = solid, recurrent edges = dashed, gated edges = orange.
    """
    G = to_networkx(network)

    colors = {"input": "lightgreen", "output": "salmon"}
    node_colors = [colors.get(G.nodes[n]["type"], "lightblue") for n in G.nodes()]

    # Layout: group nodes by layer
    pos = {}
    layer_nodes = {}
    for n in G.nodes():
        layer_nodes.setdefault(G.nodes[n]["layer"], []).append(n)
    for layer, nodes in layer_nodes.items():
        for i, n in enumerate(nodes):
            pos[n] = (layer, -i)

    nx.draw_networkx_nodes(G, pos, node_color=node_colors, node_size=800, ax=ax)

    edges = [(u, v) for u, v in G.edges() if u != v]
    edge_colors = ["orange" if G.edges[e]["gater"] is not None else "black" for e in edges]
    styles = ["dashed" if G.edges[e]["recurrent"] else "solid" for e in edges]
    nx.draw_networkx_edges(G, pos, edgelist=edges, edge_color=edge_colors, style=styles, ax=ax)

    labels = {n: str(G.nodes[n]["position"]) for n in G.nodes()}
    nx.draw_networkx_labels(G, pos, labels=labels, font_size=8, ax=ax)

    if ax is None:
        plt.show()
