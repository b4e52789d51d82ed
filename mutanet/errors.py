class MutanetError(Exception):
    """Base class for errors raised by mutanet."""


class ShapeMismatch(MutanetError, ValueError):
    """An input or target vector does not match the network's declared size."""


class InvalidMutation(MutanetError):
    """A mutation operator's precondition is not met.

    Operators raise it; `Network.mutate` reports it as a no-op.
    """


class MalformedRecord(MutanetError, ValueError):
    """A serialized network references missing nodes, duplicates a
    connection or carries an invalid gate."""
