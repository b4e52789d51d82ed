"""Cost functions: `(target, output) -> float`, averaged over outputs."""

import math
from typing import Callable, Dict, Sequence


def mse(target: Sequence[float], output: Sequence[float]) -> float:
    return sum((t - o) ** 2 for t, o in zip(target, output)) / len(output)


def cross_entropy(target, output):
    error = 0.0
    for t, o in zip(target, output):
        # clamp to avoid log(0)
        o = min(max(o, 1e-15), 1 - 1e-15)
        error -= t * math.log(o) + (1 - t) * math.log(1 - o)
    return error / len(output)


def binary(target, output):
    """Fraction of outputs on the wrong side of 0.5."""
    misses = sum(1 for t, o in zip(target, output) if round(t * 2) != round(o * 2))
    return misses / len(output)


def mae(target, output):
    return sum(abs(t - o) for t, o in zip(target, output)) / len(output)


def mape(target, output):
    return sum(abs((o - t) / max(t, 1e-15)) for t, o in zip(target, output)) / len(output)


def msle(target, output):
    error = sum(
        math.log(max(t, 1e-15)) - math.log(max(o, 1e-15))
        for t, o in zip(target, output)
    )
    return error / len(output)


def hinge(target, output):
    return sum(max(0.0, 1 - t * o) for t, o in zip(target, output)) / len(output)


COSTS: Dict[str, Callable[[Sequence[float], Sequence[float]], float]] = {
    "mse": mse,
    "cross_entropy": cross_entropy,
    "binary": binary,
    "mae": mae,
    "mape": mape,
    "msle": msle,
    "hinge": hinge,
}


def get_cost(cost) -> Callable[[Sequence[float], Sequence[float]], float]:
    if callable(cost):
        return cost
    try:
        return COSTS[str(cost).lower()]
    except KeyError:
        raise ValueError(f"Unknown cost function: {cost}") from None
