"""JSON codec for call graphs.

Encodes a FunctionGraph to the fixed-layout JSON document consumed by the
graph viewer, decodes such documents back into graphs, and offers a cheap
structural check for text that claims to be one.

Document layout:

    {
      "nodes": [ {"name", "file", "line", "isStub", "isMissing", "isExternal"}, ... ],
      "edges": [ {"from", "to"}, ... ]
    }
"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from pydantic import ValidationError

from codemap.config import get_settings
from codemap.core.errors import GraphCodecError, GraphDecodeError
from codemap.core.graph import FunctionGraph, FunctionNode
from codemap.core.schemas import GraphDocument, LenientGraphDocument

logger = logging.getLogger(__name__)


_ESCAPES: Dict[str, str] = {
    '"': '\\"',
    '\\': '\\\\',
    '\n': '\\n',
    '\r': '\\r',
    '\t': '\\t',
}

_UNESCAPES: Dict[str, str] = {value[1]: key for key, value in _ESCAPES.items()}


# ============================================================================
# Escaping
# ============================================================================

def escape_json(text: str) -> str:
    """Escape quote, backslash, LF, CR and TAB; everything else passes through.

    Each escaped character becomes two characters, so the result is longer than
    the input by exactly the number of escaped characters.
    """
    return "".join(_ESCAPES.get(ch, ch) for ch in text)


def unescape_json(text: str) -> str:
    """Reverse ``escape_json``.

    Raises:
        GraphDecodeError: On a backslash sequence escape_json never produces
    """
    out: List[str] = []
    i = 0
    while i < len(text):
        ch = text[i]
        if ch != "\\":
            out.append(ch)
            i += 1
            continue
        if i + 1 >= len(text):
            raise GraphDecodeError(f"Dangling backslash at offset {i}")
        nxt = text[i + 1]
        if nxt not in _UNESCAPES:
            raise GraphDecodeError(f"Unknown escape \\{nxt} at offset {i}")
        out.append(_UNESCAPES[nxt])
        i += 2
    return "".join(out)


def _bool(value: bool) -> str:
    return "true" if value else "false"


_INT_CHUNK_DIGITS = 1000


def _int_text(value: int) -> str:
    """Decimal text of ``value``, including ints past the str() digit limit."""
    value = int(value)
    try:
        return str(value)
    except ValueError:
        pass
    sign = "-" if value < 0 else ""
    value = abs(value)
    base = 10 ** _INT_CHUNK_DIGITS
    chunks: List[int] = []
    while value:
        value, rem = divmod(value, base)
        chunks.append(rem)
    head = str(chunks[-1])
    tail = "".join(f"{chunk:0{_INT_CHUNK_DIGITS}d}" for chunk in reversed(chunks[:-1]))
    return sign + head + tail


# ============================================================================
# Encoding
# ============================================================================

def graph_to_json(graph: FunctionGraph) -> str:
    """Encode a graph as a JSON document.

    Output is byte-identical for equal graphs. Edge indices are written as-is,
    without checking them against the node list. Integers of any size are
    written in full, although ``json_to_graph`` rejects integer literals longer
    than the interpreter's int conversion limit (4300 digits by default).

    Args:
        graph: Graph to encode (not modified)

    Returns:
        JSON text with 2-space indentation and no trailing newline
    """
    parts: List[str] = ["{\n"]

    parts.append('  "nodes": [\n')
    for i, node in enumerate(graph.nodes):
        parts.append("    {\n")
        parts.append(f'      "name": "{escape_json(node.name)}",\n')
        parts.append(f'      "file": "{escape_json(node.file)}",\n')
        parts.append(f'      "line": {_int_text(node.line)},\n')
        parts.append(f'      "isStub": {_bool(node.is_stub)},\n')
        parts.append(f'      "isMissing": {_bool(node.is_missing)},\n')
        parts.append(f'      "isExternal": {_bool(node.is_external)}\n')
        parts.append("    }")
        if i < len(graph.nodes) - 1:
            parts.append(",")
        parts.append("\n")
    parts.append("  ],\n")

    parts.append('  "edges": [\n')
    for i, (src, dst) in enumerate(graph.edges):
        parts.append("    {\n")
        parts.append(f'      "from": {_int_text(src)},\n')
        parts.append(f'      "to": {_int_text(dst)}\n')
        parts.append("    }")
        if i < len(graph.edges) - 1:
            parts.append(",")
        parts.append("\n")
    parts.append("  ]\n")

    parts.append("}")

    logger.debug(f"Encoded graph: {len(graph.nodes)} nodes, {len(graph.edges)} edges")
    return "".join(parts)


# ============================================================================
# Decoding
# ============================================================================

class _DuplicateKeys(dict):
    """Parsed JSON object that repeated at least one key."""

    def __init__(self, pairs: List[Tuple[str, Any]], duplicate: str):
        super().__init__(pairs)
        self.duplicate = duplicate


def _mark_duplicates(pairs: List[Tuple[str, Any]]) -> Dict[str, Any]:
    seen = set()
    for key, _ in pairs:
        if key in seen:
            return _DuplicateKeys(pairs, key)
        seen.add(key)
    return dict(pairs)


def _find_duplicate(value: Any, loc: Tuple[Union[str, int], ...] = ()) -> Optional[Tuple[Union[str, int], ...]]:
    """Location of the first repeated key, in document order."""
    if isinstance(value, dict):
        for key, child in value.items():
            found = _find_duplicate(child, loc + (key,))
            if found:
                return found
        if isinstance(value, _DuplicateKeys):
            return loc + (value.duplicate,)
    elif isinstance(value, list):
        for i, child in enumerate(value):
            found = _find_duplicate(child, loc + (i,))
            if found:
                return found
    return None


def _reject_constant(name: str) -> Any:
    raise GraphDecodeError(f"Non-standard number {name}")


def _format_loc(loc: Tuple[Union[str, int], ...]) -> Optional[str]:
    if not loc:
        return None
    return ".".join(str(part) for part in loc)


def json_to_graph(
    text: str,
    *,
    strict: Optional[bool] = None,
    check_edges: Optional[bool] = None,
) -> FunctionGraph:
    """Decode a JSON document into a new FunctionGraph.

    Args:
        text: Document text
        strict: Reject unknown fields (defaults to settings.strict_decode)
        check_edges: Reject edges pointing outside the node list
            (defaults to settings.check_edges)

    Returns:
        Graph with nodes and edges in document order

    Raises:
        GraphDecodeError: Malformed JSON (with line/column), duplicate keys,
            or a document that does not match the schema (with path)
    """
    settings = get_settings()
    if strict is None:
        strict = settings.strict_decode
    if check_edges is None:
        check_edges = settings.check_edges

    try:
        raw = json.loads(
            text,
            object_pairs_hook=_mark_duplicates,
            parse_constant=_reject_constant,
        )
        duplicate = _find_duplicate(raw)
    except json.JSONDecodeError as e:
        raise GraphDecodeError(e.msg, line=e.lineno, column=e.colno) from e
    except RecursionError as e:
        raise GraphDecodeError("Document is nested too deeply") from e
    except ValueError as e:
        # int literals past the interpreter's digit limit
        raise GraphDecodeError(str(e)) from e

    if duplicate:
        raise GraphDecodeError(f"Duplicate key {duplicate[-1]!r}", path=_format_loc(duplicate))

    schema = GraphDocument if strict else LenientGraphDocument
    try:
        document = schema.model_validate(raw)
    except ValidationError as e:
        first = e.errors()[0]
        raise GraphDecodeError(first["msg"], path=_format_loc(first["loc"]) or "document") from e

    graph = FunctionGraph()
    for node in document.nodes:
        graph.add_node(FunctionNode(
            name=node.name,
            file=node.file,
            line=node.line,
            is_stub=node.is_stub,
            is_missing=node.is_missing,
            is_external=node.is_external,
        ))
    for edge in document.edges:
        graph.add_edge(edge.from_, edge.to)

    dangling = graph.dangling_edges()
    if dangling:
        if check_edges:
            i = dangling[0]
            src, dst = graph.edges[i]
            raise GraphDecodeError(
                f"Edge ({src}, {dst}) references a node outside 0..{len(graph.nodes) - 1}",
                path=f"edges.{i}",
            )
        logger.warning(f"Decoded graph has {len(dangling)} edge(s) pointing outside the node list")

    logger.debug(f"Decoded graph: {len(graph.nodes)} nodes, {len(graph.edges)} edges")
    return graph


# ============================================================================
# Structural check
# ============================================================================

@dataclass
class StructureReport:
    """Outcome of ``check_structure``."""
    ok: bool
    reason: Optional[str] = None
    offset: Optional[int] = None  # Character index of the violation, if any

    def __bool__(self) -> bool:
        return self.ok


def check_structure(text: str) -> StructureReport:
    """Cheap structural smoke test for a graph document.

    Requires the literal substrings '"nodes"' and '"edges"' and balanced
    openers/closers. Brace vs bracket kinds are counted together, so "{]"
    passes. JSON syntax and per-node fields are not looked at; use
    ``json_to_graph`` for that.

    Args:
        text: Candidate document

    Returns:
        StructureReport naming the first violation found
    """
    if '"nodes"' not in text:
        return StructureReport(False, 'missing "nodes"')
    if '"edges"' not in text:
        return StructureReport(False, 'missing "edges"')

    depth = 0
    for offset, ch in enumerate(text):
        if ch in "{[":
            depth += 1
        elif ch in "}]":
            depth -= 1
            if depth < 0:
                return StructureReport(False, "unmatched closer", offset)

    if depth != 0:
        return StructureReport(False, "unclosed opener", len(text))

    return StructureReport(True)


def is_valid_graph_json(text: str) -> bool:
    """Boolean form of ``check_structure``."""
    return check_structure(text).ok


# ============================================================================
# File helpers
# ============================================================================

def load_graph(path: Union[str, Path], **kwargs: Any) -> FunctionGraph:
    """Read and decode a graph document from disk.

    Keyword arguments are passed through to ``json_to_graph``.
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise GraphCodecError(f"Cannot read {path}: {e}") from e
    return json_to_graph(text, **kwargs)


def save_graph(graph: FunctionGraph, path: Union[str, Path]) -> Path:
    """Encode ``graph`` and write it to ``path``. Returns the path written."""
    path = Path(path)
    try:
        path.write_text(graph_to_json(graph), encoding="utf-8", newline="")
    except (OSError, UnicodeEncodeError) as e:
        raise GraphCodecError(f"Cannot write {path}: {e}") from e
    logger.info(f"Wrote graph to {path}")
    return path
