"""
Marker node registry.

Holds the placed marker nodes in insertion order. Mutations swap in a new
tuple so readers iterating a snapshot never see a torn add/remove.
"""

import logging
import threading
from typing import List, Tuple

from .location_node import MarkerNode

logger = logging.getLogger(__name__)


class MarkerNodeRegistry:
    """Set of placed marker nodes with tag lookups."""

    def __init__(self):
        self._lock = threading.Lock()
        self._nodes: Tuple[MarkerNode, ...] = ()

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, node: MarkerNode) -> bool:
        return any(existing is node for existing in self._nodes)

    def __iter__(self):
        return iter(self._nodes)

    def nodes(self) -> Tuple[MarkerNode, ...]:
        return self._nodes

    def add(self, node: MarkerNode) -> bool:
        """
        Register a node.

        Returns:
            False if the node is already registered
        """
        with self._lock:
            if any(existing is node for existing in self._nodes):
                logger.debug(f"Node {node.tag!r} already registered")
                return False
            self._nodes = self._nodes + (node,)
        return True

    def remove(self, node: MarkerNode) -> bool:
        """
        Unregister a node.

        Returns:
            True if the node was registered
        """
        with self._lock:
            remaining = tuple(existing for existing in self._nodes if existing is not node)
            if len(remaining) == len(self._nodes):
                return False
            self._nodes = remaining
        return True

    def find_by_tag(self, tag: str) -> List[MarkerNode]:
        """All nodes with this tag; an empty tag matches nothing."""
        if not tag:
            return []
        return [node for node in self._nodes if node.tag == tag]

    def contains_tag(self, tag: str) -> bool:
        return len(self.find_by_tag(tag)) > 0

    def unconfirmed(self) -> List[MarkerNode]:
        return [node for node in self._nodes if not node.confirmed]

    def continually_updated(self) -> List[MarkerNode]:
        return [node for node in self._nodes if node.continually_update_position_and_scale]
