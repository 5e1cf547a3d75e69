"""
Pydantic schemas for the call graph JSON document.

The decoder validates parsed JSON against these before building a
FunctionGraph. Field names follow the wire format (camelCase flags, "from"/"to"
edge endpoints) through aliases.
"""

from typing import List
from pydantic import BaseModel, ConfigDict, Field


class NodeSchema(BaseModel):
    """One entry of the "nodes" array."""

    model_config = ConfigDict(extra="forbid", strict=True)

    name: str = Field(..., description="Function or symbol name")
    file: str = Field(..., description="Source path as recorded by the analyzer")
    line: int = Field(..., ge=0, description="Line of the definition (0 if unknown)")
    is_stub: bool = Field(..., alias="isStub")
    is_missing: bool = Field(..., alias="isMissing")
    is_external: bool = Field(..., alias="isExternal")


class EdgeSchema(BaseModel):
    """One entry of the "edges" array: caller -> callee by node position."""

    model_config = ConfigDict(extra="forbid", strict=True)

    from_: int = Field(..., alias="from")
    to: int = Field(...)


class GraphDocument(BaseModel):
    """Top-level document."""

    model_config = ConfigDict(extra="forbid", strict=True)

    nodes: List[NodeSchema]
    edges: List[EdgeSchema]


# Lenient variants: same field rules, unknown keys are dropped instead of rejected.

class LenientNodeSchema(NodeSchema):
    model_config = ConfigDict(extra="ignore", strict=True)


class LenientEdgeSchema(EdgeSchema):
    model_config = ConfigDict(extra="ignore", strict=True)


class LenientGraphDocument(GraphDocument):
    model_config = ConfigDict(extra="ignore", strict=True)

    nodes: List[LenientNodeSchema]
    edges: List[LenientEdgeSchema]
