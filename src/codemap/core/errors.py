"""Exceptions raised by the graph codec."""

from typing import Optional


class GraphCodecError(Exception):
    """Base exception for graph codec errors."""

    def __init__(self, message: str, path: Optional[str] = None):
        """Initialize codec error.

        Args:
            message: Error message
            path: Dotted location inside the document (e.g. "nodes.3.line")
        """
        self.message = message
        self.path = path
        super().__init__(message)

    def __str__(self) -> str:
        if self.path:
            return f"{self.path}: {self.message}"
        return self.message


class GraphDecodeError(GraphCodecError):
    """Raised when a document cannot be turned back into a graph."""

    def __init__(
        self,
        message: str,
        path: Optional[str] = None,
        line: Optional[int] = None,
        column: Optional[int] = None,
    ):
        self.line = line
        self.column = column
        super().__init__(message, path=path)

    def __str__(self) -> str:
        if self.line is not None:
            return f"line {self.line} column {self.column}: {self.message}"
        return super().__str__()
