import random

import matplotlib
import pytest

matplotlib.use("Agg")

from mutanet import Network, architect


@pytest.fixture(autouse=True)
def seed():
    random.seed(1234)


@pytest.fixture
def perceptron():
    """2-4-4-4-2 perceptron used by the mutation tests."""
    return architect.perceptron(2, 4, 4, 4, 2)


@pytest.fixture
def small_network():
    """Unconnected 2-in / 1-out network with one hidden node and fixed weights."""
    network = Network(2, 1, connected=False)
    in1, in2 = network.input_nodes()
    out = network.output_nodes()[0]
    hidden = network.add_node(bias=0.5)
    network.connect(in1, hidden, 0.5)
    network.connect(in2, hidden, -0.25)
    network.connect(hidden, out, 2.0)
    network.nodes[out].bias = -1.0
    return network
