"""Exception hierarchy for lazytreelib.

Most tree conditions are handled as silent no-ops. These exceptions are
raised only in strict mode, for invalid configuration, or when an error
policy gives up on repository failures.
"""

from typing import Any, Optional


class TreeStoreError(Exception):
    """Base class for every error raised by lazytreelib."""


class NodeNotFoundError(TreeStoreError, LookupError):
    """A referenced node id does not exist in the current snapshot."""

    def __init__(self, node_id: Any, operation: Optional[str] = None):
        self.node_id = node_id
        self.operation = operation
        where = f" during {operation}" if operation else ""
        super().__init__(f"Node {node_id!r} not found{where}")


class InvalidOperationError(TreeStoreError):
    """The request is structurally disallowed (cycle, root removal, ...)."""

    def __init__(self, message: str, operation: Optional[str] = None):
        self.operation = operation
        super().__init__(message)


class FetchError(TreeStoreError):
    """Raised by error policies that stop tolerating repository failures."""

    def __init__(self, message: str, node_id: Any = None):
        self.node_id = node_id
        super().__init__(message)


class ConfigurationError(TreeStoreError, ValueError):
    """A StoreConfig failed validation."""

    def __init__(self, errors):
        self.errors = list(errors)
        super().__init__("Invalid store configuration: " + "; ".join(self.errors))
