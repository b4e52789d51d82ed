"""
Tests for online training: learning capability on small truth tables, the
training options and the cost and rate helpers.
"""

import logging
import math
import threading
from collections.abc import Mapping

import pytest

from mutanet import Config, Network, ShapeMismatch, TrainOptions, architect
from mutanet.training import cost, rate


AND = [([0, 0], [0]), ([0, 1], [0]), ([1, 0], [0]), ([1, 1], [1])]
XOR = [([0, 0], [0]), ([0, 1], [1]), ([1, 0], [1]), ([1, 1], [0])]
XNOR = [([0, 0], [1]), ([0, 1], [0]), ([1, 0], [0]), ([1, 1], [1])]
OR = [([0, 0], [0]), ([0, 1], [1]), ([1, 0], [1]), ([1, 1], [1])]
NOT = [([0], [1]), ([1], [0])]


def learn_set(dataset, iterations, error):
    sample = dataset[0]
    if isinstance(sample, Mapping):
        inputs, outputs = sample["input"], sample["output"]
    else:
        inputs, outputs = sample
    network = architect.perceptron(len(inputs), 5, len(outputs))
    result = network.train(dataset, iterations=iterations, error=error, shuffle=True, rate=0.3)
    assert result.error < error
    return result


# ============================================================================
# Learning capability
# ============================================================================

@pytest.mark.parametrize("dataset, iterations", [
    (AND, 1000),
    (XOR, 2000),
    (NOT, 1000),
    (XNOR, 2000),
    (OR, 1000),
])
def test_learns_truth_table(dataset, iterations):
    result = learn_set(dataset, iterations, 0.002)
    assert result.iterations <= iterations


def test_learns_dict_samples():
    dataset = [{"input": inputs, "output": outputs} for inputs, outputs in AND]
    learn_set(dataset, 1000, 0.002)


def test_lstm_learns_sequence_xor():
    network = architect.lstm(1, 1, 1)
    network.train([
        {"input": [0], "output": [0]},
        {"input": [1], "output": [1]},
        {"input": [1], "output": [0]},
        {"input": [0], "output": [1]},
        {"input": [0], "output": [0]},
    ], error=0.001, iterations=5000, rate=0.3)

    network.activate([0])
    assert network.activate([1])[0] > 0.9, "LSTM error"
    assert network.activate([1])[0] < 0.1, "LSTM error"
    assert network.activate([0])[0] > 0.9, "LSTM error"
    assert network.activate([0])[0] < 0.1, "LSTM error"


def test_missing_the_target_is_not_an_error():
    network = architect.perceptron(2, 5, 1)
    result = network.train(XOR, iterations=1, error=0.002)
    assert result.iterations == 1
    assert result.error > 0.002
    assert not result.cancelled


# ============================================================================
# Propagation
# ============================================================================

def test_propagate_moves_output_towards_target(small_network):
    before = small_network.activate([1.0, 0.0])[0]
    for _ in range(20):
        small_network.activate([1.0, 0.0])
        small_network.propagate([1.0], rate=0.3)
    assert small_network.activate([1.0, 0.0])[0] > before


def test_propagate_without_update_defers_changes(small_network):
    weights = {cid: conn.weight for cid, conn in small_network.connections.items()}
    small_network.activate([1.0, 1.0])
    small_network.propagate([1.0], update=False)
    assert {cid: conn.weight for cid, conn in small_network.connections.items()} == weights

    small_network.activate([1.0, 1.0])
    small_network.propagate([1.0], update=True)
    assert {cid: conn.weight for cid, conn in small_network.connections.items()} != weights


def test_propagate_shape_mismatch(small_network):
    small_network.activate([0.0, 0.0])
    with pytest.raises(ShapeMismatch):
        small_network.propagate([1.0, 0.0])


def test_scaled_output_error_learns_slower():
    plain = architect.perceptron(2, 3, 1)
    scaled = Network.from_json(plain.to_json(), config=Config(scale_output_error=True))
    plain_result = plain.train(AND, iterations=50, error=None)
    scaled_result = scaled.train(AND, iterations=50, error=None)
    assert scaled_result.error > plain_result.error


# ============================================================================
# Options
# ============================================================================

class TestOptions:

    def test_iteration_cap(self):
        network = architect.perceptron(2, 3, 1)
        result = network.train(XOR, iterations=7, error=None)
        assert result.iterations == 7
        assert result.time >= 0

    def test_error_target_stops_early(self):
        network = architect.perceptron(1, 3, 1)
        result = network.train(NOT, iterations=1000, error=0.2)
        assert result.iterations < 1000
        assert result.error <= 0.2

    def test_needs_cap_or_target(self):
        with pytest.raises(ValueError):
            Network(2, 1).train(AND, iterations=None, error=None)

    def test_warns_without_iteration_cap(self, caplog):
        caplog.set_level(logging.WARNING)
        network = architect.perceptron(1, 3, 1, config=Config(warnings=True))
        network.train(NOT, error=0.5)
        assert "No iteration cap" in caplog.text

    def test_empty_dataset(self):
        with pytest.raises(ValueError):
            Network(2, 1).train([], iterations=5)

    def test_shape_mismatch(self):
        with pytest.raises(ShapeMismatch):
            Network(3, 1).train(AND, iterations=5)

    def test_batch_size(self):
        network = architect.perceptron(2, 3, 1)
        assert network.train(AND, iterations=5, error=None, batch_size=2).iterations == 5
        with pytest.raises(ValueError):
            network.train(AND, iterations=5, batch_size=5)

    def test_unknown_keys_are_ignored(self):
        network = architect.perceptron(2, 3, 1)
        result = network.train(AND, {"iterations": 3, "error": None, "verbose": True})
        assert result.iterations == 3
        assert TrainOptions.from_mapping({"popsize": 50}).error == 0.05

    def test_callable_rate(self):
        seen = []

        def schedule_rate(iteration):
            seen.append(iteration)
            return 0.1

        architect.perceptron(2, 3, 1).train(AND, iterations=3, error=None, rate=schedule_rate)
        assert seen == [1, 2, 3]

    def test_rate_policy(self):
        options = TrainOptions(rate=0.5, rate_policy=rate.step(gamma=0.5, step_size=2))
        assert options.rate_at(1) == 0.5
        assert options.rate_at(4) == 0.125

    def test_cancel_with_event(self):
        event = threading.Event()
        event.set()
        result = architect.perceptron(2, 3, 1).train(AND, iterations=100, cancel=event)
        assert result.cancelled
        assert result.iterations == 0

    def test_cancel_with_callable(self):
        calls = []

        def cancel():
            calls.append(1)
            return len(calls) > 5

        result = architect.perceptron(2, 3, 1).train(AND, iterations=100, error=None, cancel=cancel)
        assert result.cancelled
        assert result.iterations == 5

    def test_schedule(self):
        records = []
        architect.perceptron(2, 3, 1).train(
            AND, iterations=50, error=None,
            schedule={"iterations": 10, "function": records.append},
        )
        assert [r["iteration"] for r in records] == [10, 20, 30, 40, 50]
        assert all(r["error"] >= 0 for r in records)

    def test_log(self, caplog):
        caplog.set_level(logging.INFO, logger="mutanet.training.trainer")
        architect.perceptron(2, 3, 1).train(AND, iterations=4, error=None, log=2)
        assert "iteration 2 error" in caplog.text
        assert "iteration 4 error" in caplog.text

    def test_shuffle_leaves_dataset_alone(self):
        dataset = list(AND)
        architect.perceptron(2, 3, 1).train(dataset, iterations=10, error=None, shuffle=True)
        assert dataset == AND

    def test_dropout_scales_hidden_masks(self):
        network = architect.perceptron(2, 4, 1)
        network.train(AND, iterations=5, error=None, dropout=0.5)
        for nid in network.hidden_nodes():
            assert network.nodes[nid].mask == 0.5
        for nid in network.input_nodes() + network.output_nodes():
            assert network.nodes[nid].mask == 1.0

    def test_clear_option_resets_state(self):
        network = architect.lstm(1, 2, 1)
        network.train(NOT, iterations=3, error=None, clear=True)
        assert all(node.state == 0.0 for node in network.nodes.values())

    def test_momentum(self):
        result = architect.perceptron(2, 5, 1).train(AND, iterations=1000, error=0.01, momentum=0.5, shuffle=True)
        assert result.error < 0.01


def test_network_test():
    network = architect.perceptron(2, 3, 1)
    result = network.test(AND)
    expected = sum(cost.mse(target, network.activate(inputs)) for inputs, target in AND) / len(AND)
    assert result["error"] == pytest.approx(expected)
    assert result["time"] >= 0
    assert network.test(AND, cost="mae")["error"] != result["error"]


# ============================================================================
# Costs and rates
# ============================================================================

def test_costs():
    assert cost.mse([1, 0], [0.5, 0.5]) == 0.25
    assert cost.cross_entropy([1], [0.5]) == pytest.approx(math.log(2))
    assert cost.cross_entropy([1], [1.0]) == pytest.approx(0.0, abs=1e-12)
    assert cost.binary([1, 0], [0.9, 0.8]) == 0.5
    assert cost.mae([1, 0], [0.5, 0.25]) == 0.375
    assert cost.hinge([1], [0.25]) == 0.75
    assert cost.mape([2], [1]) == 0.5


def test_get_cost():
    assert cost.get_cost("MSE") is cost.mse
    assert cost.get_cost(cost.hinge) is cost.hinge
    with pytest.raises(ValueError):
        cost.get_cost("huber")


def test_rates():
    assert rate.fixed()(0.3, 1000) == 0.3
    assert rate.step(gamma=0.5, step_size=10)(1.0, 25) == 0.25
    assert rate.exp(gamma=0.5)(1.0, 3) == 0.125
    assert rate.inv(gamma=1.0, power=1)(1.0, 3) == 0.25
