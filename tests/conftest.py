"""Shared fixtures for codemap tests."""

import pytest

from codemap import config as config_module
from codemap.core.graph import FunctionGraph, FunctionNode


@pytest.fixture(autouse=True)
def restore_settings_cache(monkeypatch):
    """
    Ensure settings are read fresh for every test, without CODEMAP_* leaking in.
    """
    for name in ("LOG_LEVEL", "STRICT_DECODE", "CHECK_EDGES", "OUTPUT_FILE"):
        monkeypatch.delenv(f"CODEMAP_{name}", raising=False)
    config_module.reload_settings()
    yield
    config_module.get_settings.cache_clear()


@pytest.fixture
def demo_graph():
    """The viewer's demo call graph: seven functions, six calls."""
    graph = FunctionGraph()
    graph.add_node(FunctionNode("main", "main.cpp", 10))
    graph.add_node(FunctionNode("parseFile", "parser.cpp", 25))
    graph.add_node(FunctionNode("buildGraph", "graph.cpp", 40))
    graph.add_node(FunctionNode("exportJSON", "json.cpp", 15))
    graph.add_node(FunctionNode("TODO_validate", "validator.cpp", 5, is_stub=True))
    graph.add_node(FunctionNode("missingFunc", "", 0, is_missing=True))
    graph.add_node(FunctionNode("std::cout", "", 0, is_external=True))
    for src, dst in [(0, 1), (0, 2), (1, 4), (2, 3), (2, 5), (3, 6)]:
        graph.add_edge(src, dst)
    return graph
