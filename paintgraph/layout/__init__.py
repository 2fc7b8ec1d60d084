"""Force-directed layout engine."""

from .forces import CenterForce, CollideForce, Force, LinkForce, ManyBodyForce, NodeState, ResolvedLink
from .state import EdgePosition, LayoutSnapshot, LayoutState, NodePosition

__all__ = [
    "CenterForce",
    "CollideForce",
    "EdgePosition",
    "Force",
    "LayoutSnapshot",
    "LayoutState",
    "LinkForce",
    "ManyBodyForce",
    "NodePosition",
    "NodeState",
    "ResolvedLink",
]
