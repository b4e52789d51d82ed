import math
from enum import Enum
from typing import Callable, Dict, Tuple


class Activation(Enum):
    """Squashing functions a node can use. Each member maps to a matched
    (function, derivative) pair in `ACTIVATIONS`."""
    LOGISTIC = "LOGISTIC"
    TANH = "TANH"
    IDENTITY = "IDENTITY"
    STEP = "STEP"
    RELU = "RELU"
    SOFTSIGN = "SOFTSIGN"
    SINUSOID = "SINUSOID"
    GAUSSIAN = "GAUSSIAN"
    BENT_IDENTITY = "BENT_IDENTITY"
    BIPOLAR = "BIPOLAR"
    BIPOLAR_SIGMOID = "BIPOLAR_SIGMOID"
    HARD_TANH = "HARD_TANH"
    ABSOLUTE = "ABSOLUTE"
    INVERSE = "INVERSE"
    SELU = "SELU"

    def __call__(self, x: float) -> float:
        return ACTIVATIONS[self][0](x)

    def derivative(self, x: float) -> float:
        return ACTIVATIONS[self][1](x)


def _logistic(x):
    # math.exp overflows past ~709
    if x < -700:
        return 0.0
    return 1 / (1 + math.exp(-x))


def _logistic_derivative(x):
    fx = _logistic(x)
    return fx * (1 - fx)


def _tanh_derivative(x):
    return 1 - math.tanh(x) ** 2


def _softsign(x):
    return x / (1 + abs(x))


def _softsign_derivative(x):
    return 1 / (1 + abs(x)) ** 2


def _gaussian(x):
    return math.exp(-x * x)


def _gaussian_derivative(x):
    return -2 * x * math.exp(-x * x)


def _bent_identity(x):
    return (math.sqrt(x * x + 1) - 1) / 2 + x


def _bent_identity_derivative(x):
    return x / (2 * math.sqrt(x * x + 1)) + 1


def _bipolar_sigmoid(x):
    return 2 * _logistic(x) - 1


def _bipolar_sigmoid_derivative(x):
    d = _bipolar_sigmoid(x)
    return 0.5 * (1 + d) * (1 - d)


SELU_ALPHA = 1.6732632423543772848170429916717
SELU_SCALE = 1.0507009873554804934193349852946


def _selu(x):
    if x > 0:
        return x * SELU_SCALE
    return (SELU_ALPHA * math.exp(min(x, 0.0)) - SELU_ALPHA) * SELU_SCALE


def _selu_derivative(x):
    if x > 0:
        return SELU_SCALE
    return SELU_ALPHA * math.exp(min(x, 0.0)) * SELU_SCALE


ACTIVATIONS: Dict[Activation, Tuple[Callable[[float], float], Callable[[float], float]]] = {
    Activation.LOGISTIC: (_logistic, _logistic_derivative),
    Activation.TANH: (math.tanh, _tanh_derivative),
    Activation.IDENTITY: (lambda x: x, lambda x: 1.0),
    Activation.STEP: (lambda x: 1.0 if x > 0 else 0.0, lambda x: 0.0),
    Activation.RELU: (lambda x: x if x > 0 else 0.0, lambda x: 1.0 if x > 0 else 0.0),
    Activation.SOFTSIGN: (_softsign, _softsign_derivative),
    Activation.SINUSOID: (math.sin, math.cos),
    Activation.GAUSSIAN: (_gaussian, _gaussian_derivative),
    Activation.BENT_IDENTITY: (_bent_identity, _bent_identity_derivative),
    Activation.BIPOLAR: (lambda x: 1.0 if x > 0 else -1.0, lambda x: 0.0),
    Activation.BIPOLAR_SIGMOID: (_bipolar_sigmoid, _bipolar_sigmoid_derivative),
    Activation.HARD_TANH: (lambda x: max(-1.0, min(1.0, x)), lambda x: 1.0 if -1 < x < 1 else 0.0),
    Activation.ABSOLUTE: (abs, lambda x: -1.0 if x < 0 else 1.0),
    Activation.INVERSE: (lambda x: 1 - x, lambda x: -1.0),
    Activation.SELU: (_selu, _selu_derivative),
}


def get_activation(name) -> Activation:
    """Resolve an `Activation` from a member or its name."""
    if isinstance(name, Activation):
        return name
    return Activation[str(name).upper()]
