from .config import Config
from .errors import InvalidMutation, MalformedRecord, MutanetError, ShapeMismatch
from .network import ALL, FFW, Activation, Connection, Mutation, Network, Node
from .network.serialization import from_json, to_json
from .training import TrainOptions, TrainResult
from . import architect

__all__ = [
    "ALL",
    "Activation",
    "Config",
    "Connection",
    "FFW",
    "InvalidMutation",
    "MalformedRecord",
    "Mutation",
    "MutanetError",
    "Network",
    "Node",
    "ShapeMismatch",
    "TrainOptions",
    "TrainResult",
    "architect",
    "from_json",
    "to_json",
]
