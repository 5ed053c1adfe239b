from __future__ import annotations

import threading
from typing import Optional

from .node import Node


class Incumbent:
    """
    The best integral leaf found so far.

    A candidate replaces the current best when its value is strictly lower,
    or when the values are equal and the candidate comes first in pre-order.
    In a sequential depth-first build later leaves always come later in
    pre-order, so ties keep the first leaf found; building subtrees
    concurrently gives the same answer.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._node: Optional[Node] = None

    @property
    def node(self) -> Optional[Node]:
        return self._node

    @property
    def value(self) -> float:
        node = self._node
        return node.value if node is not None else float("inf")

    def offer(self, node: Node) -> bool:
        with self._lock:
            current = self._node
            if current is not None and not self._improves(node, current):
                return False
            if current is not None:
                current.status.best = False
            node.status.best = True
            self._node = node
            return True

    @staticmethod
    def _improves(candidate: Node, current: Node) -> bool:
        if candidate.value < current.value:
            return True
        return candidate.value == current.value and candidate.path < current.path
