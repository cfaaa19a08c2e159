"""
Pydantic data models for the road sketch engine.

Render state and query results handed to collaborators. Nodes are
referenced by integer id; positions are plain [x, y, z] lists.
"""

from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


class Severity(str, Enum):
    """Severity levels for validation checks."""
    ERROR = "error"
    WARN = "warn"
    INFO = "info"


class Mesh(BaseModel):
    """Triangle mesh ready for upload: xyz vertex triples and indices."""
    vertices: List[float] = Field(default_factory=list)
    indices: List[int] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid")

    @property
    def element_count(self):
        """Number of indices to draw."""
        return len(self.indices)

    @property
    def vertex_count(self):
        return len(self.vertices) // 3

    def points(self):
        """Vertices as a list of [x, y, z]."""
        return [self.vertices[i:i + 3] for i in range(0, len(self.vertices), 3)]


class SideOffsets(BaseModel):
    """Left and right boundary points of one road where it meets a junction."""
    left: Optional[List[float]] = None
    right: Optional[List[float]] = None

    model_config = ConfigDict(extra="forbid")

    @property
    def complete(self):
        return self.left is not None and self.right is not None


class RoadNode(BaseModel):
    """Derived render state for one graph node."""
    node: int
    offsets: Dict[int, SideOffsets] = Field(default_factory=dict)
    mesh: Mesh = Field(default_factory=Mesh)

    model_config = ConfigDict(extra="forbid")


class RoadSegment(BaseModel):
    """Derived render state for one graph edge, a quad between two junctions."""
    nodes: Tuple[int, int]
    mesh: Mesh = Field(default_factory=Mesh)

    model_config = ConfigDict(extra="forbid")


class SnapResult(BaseModel):
    """
    Graph-aligned pointer position.

    node is set when the query landed on an existing node, edge when it was
    projected onto an edge; neither means the point is free.
    """
    point: List[float]
    node: Optional[int] = None
    edge: Optional[Tuple[int, int]] = None

    model_config = ConfigDict(extra="forbid")


class CheckResult(BaseModel):
    """Result of a single validation check."""
    rule_id: str
    severity: Severity
    passed: bool
    message: str
    evidence: Dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(extra="forbid")


class ValidationReport(BaseModel):
    """Collection of validation check results."""
    checks: List[CheckResult] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid")

    @property
    def has_errors(self):
        """Check if any errors exist."""
        return any(c.severity == Severity.ERROR and not c.passed for c in self.checks)

    @property
    def error_count(self):
        """Count of failed error-level checks."""
        return sum(1 for c in self.checks if c.severity == Severity.ERROR and not c.passed)

    @property
    def warning_count(self):
        """Count of failed warning-level checks."""
        return sum(1 for c in self.checks if c.severity == Severity.WARN and not c.passed)


def edge_key(a, b):
    """Order-independent key for an undirected edge."""
    return (a, b) if a <= b else (b, a)
