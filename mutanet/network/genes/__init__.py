from .connection import Connection
from .node import NODE_TYPES, Node

__all__ = ["Connection", "Node", "NODE_TYPES"]
