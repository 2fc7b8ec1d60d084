"""Composable forces for the layout engine.

Each force is initialized once with the node states and then applied every
tick with the current alpha. Forces only write velocities, except the
centering force which translates positions directly.
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from random import Random

from .grid import SpatialGrid


@dataclass
class NodeState:
    """Mutable simulation state for one node."""

    index: int
    radius: float
    x: float = math.nan
    y: float = math.nan
    vx: float = 0.0
    vy: float = 0.0
    fx: float | None = None  # pinned position, overrides simulated motion
    fy: float | None = None

    @property
    def pinned(self) -> bool:
        return self.fx is not None or self.fy is not None


@dataclass(frozen=True)
class ResolvedLink:
    """An edge with its endpoints resolved to node indices."""

    source: int
    target: int
    distance: float
    strength: float = 1.0


class Force(ABC):
    """Base class: holds the node list and the jiggle random source."""

    name: str = "force"

    def __init__(self) -> None:
        self.nodes: list[NodeState] = []
        self.random = Random()

    def initialize(self, nodes: list[NodeState], random: Random) -> None:
        self.nodes = nodes
        self.random = random

    def jiggle(self) -> float:
        """Tiny random offset used to separate coincident points."""
        return (self.random.random() - 0.5) * 1e-6

    @abstractmethod
    def apply(self, alpha: float) -> None:
        """Adjust node velocities (or positions) for one tick."""


class LinkForce(Force):
    """Spring pulling each linked pair toward its rest distance.

    The velocity correction is split between the endpoints by degree, so a
    painter with many paintings moves less than each of its paintings.
    Strengths above ~2 overshoot every tick and the layout diverges.
    """

    name = "link"

    def __init__(self, links: list[ResolvedLink], iterations: int = 1) -> None:
        super().__init__()
        self.links = list(links)
        self.iterations = iterations
        self._bias: list[float] = []

    def initialize(self, nodes: list[NodeState], random: Random) -> None:
        super().initialize(nodes, random)
        count = [0] * len(nodes)
        for link in self.links:
            count[link.source] += 1
            count[link.target] += 1
        self._bias = [count[l.source] / (count[l.source] + count[l.target]) for l in self.links]

    def apply(self, alpha: float) -> None:
        nodes = self.nodes
        for _ in range(self.iterations):
            for link, bias in zip(self.links, self._bias):
                source = nodes[link.source]
                target = nodes[link.target]
                x = target.x + target.vx - source.x - source.vx
                y = target.y + target.vy - source.y - source.vy
                if x == 0:
                    x = self.jiggle()
                if y == 0:
                    y = self.jiggle()
                dist = math.sqrt(x * x + y * y)
                k = (dist - link.distance) / dist * alpha * link.strength
                x *= k
                y *= k
                target.vx -= x * bias
                target.vy -= y * bias
                source.vx += x * (1 - bias)
                source.vy += y * (1 - bias)


class ManyBodyForce(Force):
    """Pairwise charge between all nodes; negative strength repels.

    Direct O(n^2) summation. A strength of zero makes the force inert and
    the tick skips it entirely.
    """

    name = "charge"

    def __init__(
        self,
        strength: float = 0.0,
        distance_min: float = 1.0,
        distance_max: float = math.inf,
    ) -> None:
        super().__init__()
        self.strength = strength
        self.distance_min2 = distance_min * distance_min
        self.distance_max2 = distance_max * distance_max

    def apply(self, alpha: float) -> None:
        if self.strength == 0:
            return
        nodes = self.nodes
        for node in nodes:
            for other in nodes:
                if other is node:
                    continue
                x = other.x - node.x
                y = other.y - node.y
                l = x * x + y * y
                if l >= self.distance_max2:
                    continue
                if x == 0:
                    x = self.jiggle()
                    l += x * x
                if y == 0:
                    y = self.jiggle()
                    l += y * y
                if l < self.distance_min2:
                    l = math.sqrt(self.distance_min2 * l)
                w = self.strength * alpha / l
                node.vx += x * w
                node.vy += y * w


class CenterForce(Force):
    """Translate all nodes so their centroid moves toward (x, y)."""

    name = "center"

    def __init__(self, x: float = 0.0, y: float = 0.0, strength: float = 1.0) -> None:
        super().__init__()
        self.x = x
        self.y = y
        self.strength = strength

    def apply(self, alpha: float) -> None:
        nodes = self.nodes
        if not nodes:
            return
        sx = sum(n.x for n in nodes) / len(nodes)
        sy = sum(n.y for n in nodes) / len(nodes)
        sx = (sx - self.x) * self.strength
        sy = (sy - self.y) * self.strength
        for node in nodes:
            node.x -= sx
            node.y -= sy


class CollideForce(Force):
    """Resolve overlaps between nodes treated as circles of their radius.

    Uses velocity-predicted positions and splits each correction by squared
    radius. Not scaled by alpha, so overlaps keep resolving after the layout
    has cooled.
    """

    name = "collide"

    def __init__(self, strength: float = 0.8, iterations: int = 1) -> None:
        super().__init__()
        self.strength = strength
        self.iterations = iterations
        self._grid = SpatialGrid(1.0)

    def initialize(self, nodes: list[NodeState], random: Random) -> None:
        super().initialize(nodes, random)
        max_radius = max((n.radius for n in nodes), default=1.0)
        self._grid = SpatialGrid(2 * max_radius)

    def apply(self, alpha: float) -> None:
        nodes = self.nodes
        grid = self._grid
        for _ in range(self.iterations):
            grid.clear()
            for node in nodes:
                grid.insert(node.index, node.x + node.vx, node.y + node.vy)

            for node in nodes:
                ri = node.radius
                ri2 = ri * ri
                xi = node.x + node.vx
                yi = node.y + node.vy
                for j in grid.neighbors(xi, yi):
                    if j <= node.index:
                        continue
                    other = nodes[j]
                    rj = other.radius
                    r = ri + rj
                    x = xi - other.x - other.vx
                    y = yi - other.y - other.vy
                    l = x * x + y * y
                    if l >= r * r:
                        continue
                    if x == 0:
                        x = self.jiggle()
                        l += x * x
                    if y == 0:
                        y = self.jiggle()
                        l += y * y
                    l = math.sqrt(l)
                    l = (r - l) / l * self.strength
                    x *= l
                    y *= l
                    rj2 = rj * rj
                    share = rj2 / (ri2 + rj2)
                    node.vx += x * share
                    node.vy += y * share
                    other.vx -= x * (1 - share)
                    other.vy -= y * (1 - share)
