import matplotlib.pyplot as plt
import networkx as nx

from mutanet import Mutation, Network, architect
from mutanet.visualize import draw_network, layers, to_networkx


def test_layers_of_perceptron():
    network = architect.perceptron(2, 3, 2, 1)
    node_layers = layers(network)
    assert [node_layers[n] for n in network.input_nodes()] == [0, 0]
    assert sorted(node_layers[n] for n in network.hidden_nodes()) == [1, 1, 1, 2, 2]
    assert [node_layers[n] for n in network.output_nodes()] == [3]


def test_outputs_share_last_layer():
    network = Network(2, 2, connected=False)
    network.connect(network.input_nodes()[0], network.output_nodes()[0])
    node_layers = layers(network)
    assert {node_layers[n] for n in network.output_nodes()} == {1}


def test_to_networkx():
    network = architect.perceptron(2, 2, 1)
    network.mutate(Mutation.ADD_BACK_CONN)
    network.mutate(Mutation.ADD_GATE)
    G = to_networkx(network)

    assert isinstance(G, nx.DiGraph)
    assert set(G.nodes) == set(network.nodes)
    assert G.number_of_edges() == len(network.connections)
    for nid, node in network.nodes.items():
        assert G.nodes[nid]["type"] == node.type
        assert G.nodes[nid]["bias"] == node.bias
        assert G.nodes[nid]["activation"] == node.activation_type.name
    for conn in network.connections.values():
        data = G.edges[conn.in_node, conn.out_node]
        assert data["weight"] == conn.weight
        assert data["gater"] == conn.gater
        assert data["recurrent"] == conn.recurrent


def test_forward_edges_form_a_dag():
    network = architect.lstm(2, 2, 1)
    G = to_networkx(network)
    forward = G.edge_subgraph([(u, v) for u, v, recurrent in G.edges(data="recurrent") if not recurrent])
    assert nx.is_directed_acyclic_graph(forward)


def test_draw_network():
    network = architect.lstm(1, 2, 1)
    fig, ax = plt.subplots()
    draw_network(network, ax=ax)
    assert ax.collections
    plt.close(fig)
