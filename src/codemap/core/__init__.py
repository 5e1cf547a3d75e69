"""Call graph model and JSON codec.

1. Graph (graph.py):
   - FunctionNode / FunctionGraph, node status, caller/callee queries

2. Exporter (exporter.py):
   - graph_to_json / json_to_graph for the viewer's JSON document
   - check_structure / is_valid_graph_json for cheap sanity checks

Example Usage:

    from codemap.core import FunctionGraph, FunctionNode, graph_to_json, json_to_graph

    graph = FunctionGraph()
    main = graph.add_node(FunctionNode("main", "main.cpp", 10))
    helper = graph.add_node(FunctionNode("helper", "util.cpp", 3))
    graph.add_edge(main, helper)

    text = graph_to_json(graph)
    assert json_to_graph(text) == graph
"""

from codemap.core.errors import GraphCodecError, GraphDecodeError
from codemap.core.graph import FunctionGraph, FunctionNode, NodeStatus
from codemap.core.exporter import (
    StructureReport,
    check_structure,
    escape_json,
    graph_to_json,
    is_valid_graph_json,
    json_to_graph,
    load_graph,
    save_graph,
    unescape_json,
)

__all__ = [
    "FunctionGraph",
    "FunctionNode",
    "GraphCodecError",
    "GraphDecodeError",
    "NodeStatus",
    "StructureReport",
    "check_structure",
    "escape_json",
    "graph_to_json",
    "is_valid_graph_json",
    "json_to_graph",
    "load_graph",
    "save_graph",
    "unescape_json",
]
