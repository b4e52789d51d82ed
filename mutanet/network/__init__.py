from .activation import ACTIVATIONS, Activation
from .genes import Connection, Node
from .mutation import ALL, FFW, Mutation
from .network import Network

__all__ = ["ACTIVATIONS", "ALL", "Activation", "Connection", "FFW", "Mutation", "Network", "Node"]
