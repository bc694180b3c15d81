"""
Exceptions raised at the CLI boundary.

The engine itself never raises on feed data; these cover the
things a user asks for that cannot be satisfied.
"""


class SigscopeError(Exception):
    """Base class for sigscope errors."""


class EventFeedNotFoundError(SigscopeError):
    def __init__(self, path: str):
        super().__init__(f"Event feed not found: {path}")
        self.path = path


class EventFeedFormatError(SigscopeError):
    def __init__(self, path: str, reason: str):
        super().__init__(f"Could not read event feed {path}: {reason}")
        self.path = path
        self.reason = reason


class NodeNotFoundError(SigscopeError):
    def __init__(self, node_id: str):
        super().__init__(f"Node not found: {node_id}")
        self.node_id = node_id
