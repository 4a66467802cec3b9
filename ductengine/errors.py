"""
Exceptions raised by the duct sizing engine.

Recoverable topology problems (missing AHU, disconnected nodes, unknown
fittings) degrade to zero/empty results and are not errors. These are
reserved for input that cannot be solved at all.
"""


class DuctSizingError(ValueError):
    """Base class for all engine errors."""


class InvalidDimension(DuctSizingError):
    """A length, size, flow or quantity is non-positive or not finite."""


class CyclicTopology(DuctSizingError):
    """The segment graph contains a cycle, so flow cannot be propagated."""

    def __init__(self, node_id: str):
        self.node_id = node_id
        super().__init__(f"Duct network contains a cycle through node '{node_id}'")


class UnknownFitting(DuctSizingError, KeyError):
    """A fitting id is not present in the fitting library."""

    def __init__(self, fitting_id: str):
        self.fitting_id = fitting_id
        super().__init__(f"Unknown fitting '{fitting_id}'")

    def __str__(self):
        return self.args[0]


class NodeNotFound(DuctSizingError, KeyError):
    """A node id referenced by an edit does not exist in the system."""

    def __init__(self, node_id: str):
        self.node_id = node_id
        super().__init__(f"Node '{node_id}' not found")

    def __str__(self):
        return self.args[0]
