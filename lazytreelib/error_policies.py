"""
Error handling policies for lazytreelib.

This module provides a flexible error handling system through the Policy
pattern, allowing users to define what happens when the node repository
fails to produce a node's children.

Whatever the policy decides, the store has already cleared the node's
``is_loading`` flag and left it unloaded, so a later expand can retry.
"""

import sys
from abc import ABC, abstractmethod
from typing import Any, Dict, List

from .exceptions import FetchError


class ErrorPolicy(ABC):
    """
    Base class for fetch failure policies.

    Subclasses implement different strategies for handling errors raised
    by ``NodeRepository.fetch_children``.
    """

    @abstractmethod
    async def handle(self, error: Exception, method_name: str, node_id: Any) -> None:
        """
        Handle an error that occurred while fetching children.

        Args:
            error: The exception that was raised
            method_name: Name of the failed operation (e.g. 'fetch_children')
            node_id: Identifier of the node being loaded

        Returns:
            None to let the load finish quietly, or raises to propagate.
        """
        pass

    @staticmethod
    def _record(error: Exception, method_name: str, node_id: Any) -> Dict[str, Any]:
        return {
            'node_id': node_id,
            'method': method_name,
            'error': error,
            'error_type': type(error).__name__,
            'error_message': str(error),
        }


class FailFastPolicy(ErrorPolicy):
    """
    Policy that immediately re-raises any error.

    This is the default behavior: the caller of ``load_children`` sees the
    repository's own exception.
    """

    async def handle(self, error: Exception, method_name: str, node_id: Any) -> None:
        """Re-raise the error immediately."""
        raise error


class ContinueOnErrorsPolicy(ErrorPolicy):
    """
    Policy that records errors and lets the load finish without raising.

    Errors are collected for later inspection. Useful for bulk expansion
    where one unreachable node should not abort the rest.
    """

    def __init__(self, verbose: bool = True):
        """
        Initialize the policy.

        Args:
            verbose: If True, print warnings to stderr when errors occur
        """
        self.errors: List[Dict[str, Any]] = []
        self.failed_ids: List[Any] = []
        self.verbose = verbose

    async def handle(self, error: Exception, method_name: str, node_id: Any) -> None:
        """Record the error and swallow it."""
        self.errors.append(self._record(error, method_name, node_id))
        self.failed_ids.append(node_id)

        if self.verbose:
            print(f"\nWARNING: Error in {method_name} for '{node_id}': {error}", file=sys.stderr)
        return None

    def get_statistics(self) -> dict:
        """
        Get statistics about errors encountered.

        Returns:
            Dictionary with error counts and details
        """
        return {
            'total_errors': len(self.errors),
            'failed_nodes': len(set(self.failed_ids)),
            'errors': self.errors,
        }


class CollectErrorsPolicy(ErrorPolicy):
    """
    Policy that collects all errors without any output.

    Similar to ContinueOnErrorsPolicy but silent. Useful for presenting
    all failures at the end of a batch.
    """

    def __init__(self):
        self.errors: List[Dict[str, Any]] = []

    async def handle(self, error: Exception, method_name: str, node_id: Any) -> None:
        """Silently collect the error."""
        self.errors.append(self._record(error, method_name, node_id))
        return None


class ThresholdPolicy(ErrorPolicy):
    """
    Policy that tolerates errors up to a threshold, then fails.

    Useful when a few failures are expected but many indicate that the
    repository itself is down.
    """

    def __init__(self, max_errors: int = 10, verbose: bool = True):
        """
        Initialize threshold policy.

        Args:
            max_errors: Maximum errors to tolerate before failing
            verbose: If True, print warnings for errors
        """
        self.max_errors = max_errors
        self.error_count = 0
        self.verbose = verbose
        self.errors: List[Exception] = []

    async def handle(self, error: Exception, method_name: str, node_id: Any) -> None:
        """Swallow the error if under threshold, otherwise raise FetchError."""
        self.error_count += 1
        self.errors.append(error)

        if self.error_count > self.max_errors:
            raise FetchError(
                f"Error threshold exceeded ({self.max_errors} errors)", node_id=node_id
            ) from error

        if self.verbose:
            print(f"\nWARNING [{self.error_count}/{self.max_errors}]: Error in {method_name} "
                  f"for '{node_id}': {error}", file=sys.stderr)
        return None
