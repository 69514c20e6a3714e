"""Testing utilities for lazytreelib consumers."""

from .fixtures import TreeTestHelper

__all__ = ['TreeTestHelper']
