"""Call graph data model.

Nodes are functions/symbols found by the analyzer, edges are caller -> callee
relations. A node has no identity beyond its position in ``FunctionGraph.nodes``;
edges reference nodes by that position.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Tuple


Edge = Tuple[int, int]


class NodeStatus(str, Enum):
    """Display status of a node, derived from its provenance flags."""
    IMPLEMENTED = "implemented"
    STUB = "stub"
    MISSING = "missing"
    EXTERNAL = "external"


@dataclass
class FunctionNode:
    """One function or symbol in the analyzed codebase."""
    name: str
    file: str
    line: int = 0
    is_stub: bool = False  # Definition is a placeholder/TODO body
    is_missing: bool = False  # Referenced but no definition found
    is_external: bool = False  # Lives outside the analyzed codebase

    @property
    def status(self) -> NodeStatus:
        if self.is_missing:
            return NodeStatus.MISSING
        if self.is_external:
            return NodeStatus.EXTERNAL
        if self.is_stub:
            return NodeStatus.STUB
        return NodeStatus.IMPLEMENTED


@dataclass
class FunctionGraph:
    """Ordered nodes plus ordered (from, to) edges.

    Edge indices are not checked against the node list; keeping them in range
    is the caller's job. See ``dangling_edges`` to find the ones that are not.
    """
    nodes: List[FunctionNode] = field(default_factory=list)
    edges: List[Edge] = field(default_factory=list)

    def add_node(self, node: FunctionNode) -> int:
        """Append a node and return its index."""
        self.nodes.append(node)
        return len(self.nodes) - 1

    def add_edge(self, from_index: int, to_index: int) -> None:
        self.edges.append((from_index, to_index))

    def _in_range(self, index: int) -> bool:
        return 0 <= index < len(self.nodes)

    def callers_of(self, index: int) -> List[int]:
        """Indices of nodes with an edge into ``index``, in edge order."""
        return [
            src for src, dst in self.edges
            if dst == index and self._in_range(src)
        ]

    def callees_of(self, index: int) -> List[int]:
        """Indices of nodes ``index`` has an edge to, in edge order."""
        return [
            dst for src, dst in self.edges
            if src == index and self._in_range(dst)
        ]

    def dangling_edges(self) -> List[int]:
        """Positions of edges whose endpoints fall outside the node list."""
        return [
            i for i, (src, dst) in enumerate(self.edges)
            if not (self._in_range(src) and self._in_range(dst))
        ]

    def status_counts(self) -> Dict[NodeStatus, int]:
        counts = {status: 0 for status in NodeStatus}
        for node in self.nodes:
            counts[node.status] += 1
        return counts

    def filter(self, query: str) -> "FunctionGraph":
        """Subgraph around nodes whose name or file contains ``query``.

        Matching is case-insensitive. Matching nodes are kept together with
        their incident edges and the nodes at the other end of those edges.
        Kept nodes are re-indexed in their original order. An empty query
        returns a copy of the whole graph.

        Args:
            query: Substring to look for in node names and files

        Returns:
            New FunctionGraph; this graph is left untouched
        """
        if not query:
            return FunctionGraph(
                nodes=[FunctionNode(**vars(n)) for n in self.nodes],
                edges=list(self.edges),
            )

        needle = query.lower()
        matches = {
            i for i, node in enumerate(self.nodes)
            if needle in node.name.lower() or needle in node.file.lower()
        }

        keep = set(matches)
        kept_edges: List[Edge] = []
        for src, dst in self.edges:
            if not (self._in_range(src) and self._in_range(dst)):
                continue
            if src in matches or dst in matches:
                keep.update((src, dst))
                kept_edges.append((src, dst))

        remap: Dict[int, int] = {}
        result = FunctionGraph()
        for i, node in enumerate(self.nodes):
            if i in keep:
                remap[i] = result.add_node(FunctionNode(**vars(node)))

        for src, dst in kept_edges:
            result.add_edge(remap[src], remap[dst])

        return result
