import logging
import random
import threading
import time
from dataclasses import dataclass, field, fields
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from . import rate as rate_policies
from .cost import get_cost, mse
from ..errors import ShapeMismatch

logger = logging.getLogger(__name__)


@dataclass
class TrainOptions:
    iterations: Optional[int] = None
    error: Optional[float] = 0.05
    rate: Union[float, Callable[[int], float]] = 0.3
    rate_policy: Callable[[float, int], float] = field(default_factory=rate_policies.fixed)
    momentum: float = 0.0
    shuffle: bool = False
    cost: Any = mse
    batch_size: int = 1
    dropout: float = 0.0
    clear: bool = False
    log: int = 0
    schedule: Optional[Mapping[str, Any]] = None
    cancel: Any = None

    @classmethod
    def from_mapping(cls, options: Optional[Mapping[str, Any]] = None, **overrides) -> "TrainOptions":
        """Builds options from a mapping; unrecognized keys are ignored."""
        merged = dict(options or {})
        merged.update(overrides)
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(merged) - known)
        if unknown:
            logger.debug(f"Ignoring unknown training options: {unknown}")
        values = {k: v for k, v in merged.items() if k in known and v is not None}
        # an explicit None error means "no error target"
        if "error" in merged and merged["error"] is None:
            values["error"] = None
        return cls(**values)

    def rate_at(self, iteration: int) -> float:
        if callable(self.rate):
            return self.rate(iteration)
        return self.rate_policy(self.rate, iteration)

    def cancelled(self) -> bool:
        if self.cancel is None:
            return False
        if isinstance(self.cancel, threading.Event):
            return self.cancel.is_set()
        return bool(self.cancel())


@dataclass
class TrainResult:
    error: float
    iterations: int
    time: float
    cancelled: bool = False


def _samples(dataset) -> List[Tuple[Sequence[float], Sequence[float]]]:
    samples = []
    for item in dataset:
        if isinstance(item, Mapping):
            samples.append((item["input"], item["output"]))
        else:
            inputs, outputs = item
            samples.append((inputs, outputs))
    return samples


def _check_shape(network, samples):
    for inputs, outputs in samples:
        if len(inputs) != network.input_size or len(outputs) != network.output_size:
            raise ShapeMismatch(
                f"Dataset sample has {len(inputs)} inputs and {len(outputs)} outputs, "
                f"network expects {network.input_size} and {network.output_size}"
            )


def train_epoch(network, samples, batch_size, current_rate, momentum, cost) -> float:
    """One pass over `samples`; returns the mean cost."""
    error_sum = 0.0
    for i, (inputs, target) in enumerate(samples):
        update = (i + 1) % batch_size == 0 or i + 1 == len(samples)
        output = network.activate(inputs, training=True)
        network.propagate(target, current_rate, momentum, update)
        error_sum += cost(target, output)
    return error_sum / len(samples)


def train(network, dataset, options: Optional[Mapping[str, Any]] = None, **overrides) -> TrainResult:
    """Trains `network` online on `dataset` until the mean error drops to
    `options.error` or `options.iterations` epochs have run.

    Missing the error target is not an error: the achieved error is returned
    and callers decide what to make of it.
    """
    opts = TrainOptions.from_mapping(options, **overrides)
    samples = _samples(dataset)
    if not samples:
        raise ValueError("Dataset is empty")
    _check_shape(network, samples)
    if opts.batch_size < 1 or opts.batch_size > len(samples):
        raise ValueError("Batch size must be between 1 and the dataset size")
    if opts.iterations is None and opts.error is None:
        raise ValueError("Training needs an iteration cap or an error target")
    if opts.iterations is None:
        network.warn(f"No iteration cap given, training until error <= {opts.error}")

    cost = get_cost(opts.cost)
    target_error = opts.error if opts.error is not None else -1.0
    network.dropout = opts.dropout

    start = time.monotonic()
    iteration = 0
    error = float("inf")
    cancelled = False
    while error > target_error and (opts.iterations is None or iteration < opts.iterations):
        if opts.cancelled():
            logger.info(f"Training cancelled after {iteration} iterations, error {error}")
            cancelled = True
            break
        iteration += 1
        current_rate = opts.rate_at(iteration)

        error = train_epoch(network, samples, opts.batch_size, current_rate, opts.momentum, cost)
        if opts.clear:
            network.clear()

        if opts.shuffle:
            random.shuffle(samples)
        if opts.log and iteration % opts.log == 0:
            logger.info(f"iteration {iteration} error {error:.6f} rate {current_rate}")
        if opts.schedule and iteration % opts.schedule["iterations"] == 0:
            opts.schedule["function"]({"error": error, "iteration": iteration})

    if opts.clear:
        network.clear()
    if opts.dropout:
        for node in network.nodes.values():
            if node.type in ("hidden", "constant"):
                node.mask = 1 - opts.dropout

    return TrainResult(error=error, iterations=iteration, time=time.monotonic() - start, cancelled=cancelled)


def test(network, dataset, cost=None) -> Dict[str, float]:
    """Mean cost of `network` over `dataset` without training."""
    cost = get_cost(cost if cost is not None else mse)
    samples = _samples(dataset)
    if not samples:
        raise ValueError("Dataset is empty")
    _check_shape(network, samples)

    start = time.monotonic()
    error = sum(cost(target, network.activate(inputs)) for inputs, target in samples)
    return {"error": error / len(samples), "time": time.monotonic() - start}
