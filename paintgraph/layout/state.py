"""The force layout engine.

``LayoutState`` owns every node's position, velocity and pin, and is the only
place they change. Callers go through its entry points:

- ``step()`` advances one tick while active and hands a snapshot to ``on_step``
- ``pin()`` / ``unpin()`` fix or release a node (drag interaction)
- ``reheat()`` / ``cool()`` move the alpha target up or back to zero
- ``start()`` / ``stop()`` / ``toggle()`` control whether steps run at all

Stopping never discards state: velocities and positions carry over when the
engine is resumed.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from random import Random
from typing import Callable

from ..config import LayoutConfig
from ..models import PaintingGraph
from .forces import (
    CenterForce,
    CollideForce,
    Force,
    LinkForce,
    ManyBodyForce,
    NodeState,
    ResolvedLink,
)

logger = logging.getLogger(__name__)

INITIAL_ANGLE = math.pi * (3 - math.sqrt(5))


@dataclass(frozen=True)
class NodePosition:
    label: str
    x: float
    y: float
    pinned: bool = False


@dataclass(frozen=True)
class EdgePosition:
    source: str
    target: str
    x1: float
    y1: float
    x2: float
    y2: float


@dataclass(frozen=True)
class LayoutSnapshot:
    """Positions after a completed step; what the presentation layer draws."""

    step: int
    alpha: float
    nodes: tuple[NodePosition, ...]
    edges: tuple[EdgePosition, ...]

    def position(self, label: str) -> tuple[float, float]:
        for node in self.nodes:
            if node.label == label:
                return node.x, node.y
        raise KeyError(label)


StepCallback = Callable[[LayoutSnapshot], None]


class LayoutState:
    """Incremental force-directed layout of a PaintingGraph."""

    def __init__(
        self,
        graph: PaintingGraph,
        config: LayoutConfig | None = None,
        *,
        on_step: StepCallback | None = None,
        forces: list[Force] | None = None,
    ):
        self.graph = graph
        self.config = config or LayoutConfig()
        self.on_step = on_step

        self.alpha = self.config.alpha
        self.alpha_min = self.config.alpha_min
        self.alpha_decay = self.config.alpha_decay
        self.alpha_target = self.config.alpha_target
        self.velocity_decay = 1 - self.config.velocity_decay

        self.steps = 0
        self.active = True
        self._random = Random(self.config.seed)

        self.nodes: list[NodeState] = [
            NodeState(index=i, radius=node.radius) for i, node in enumerate(graph.nodes)
        ]
        self.links: list[ResolvedLink] = [
            ResolvedLink(
                source=graph.index_of(edge.source),
                target=graph.index_of(edge.target),
                distance=edge.distance,
                strength=edge.strength,
            )
            for edge in graph.edges
        ]
        self._initialize_nodes()

        self.forces: list[Force] = forces if forces is not None else self._default_forces()
        for force in self.forces:
            force.initialize(self.nodes, self._random)

    def _default_forces(self) -> list[Force]:
        cfg = self.config
        cx, cy = cfg.center
        return [
            LinkForce(self.links, iterations=cfg.link_iterations),
            ManyBodyForce(
                strength=cfg.charge_strength,
                distance_min=cfg.charge_distance_min,
                distance_max=cfg.charge_distance_max,
            ),
            CenterForce(cx, cy, strength=cfg.center_strength),
            CollideForce(strength=cfg.collide_strength, iterations=cfg.collide_iterations),
        ]

    def _initialize_nodes(self) -> None:
        """Place nodes on a phyllotaxis spiral around the origin."""
        for i, node in enumerate(self.nodes):
            radius = self.config.initial_radius * math.sqrt(0.5 + i)
            angle = i * INITIAL_ANGLE
            node.x = radius * math.cos(angle)
            node.y = radius * math.sin(angle)
            node.vx = node.vy = 0.0

    # -- lookup ---------------------------------------------------------

    def node_state(self, label: str) -> NodeState:
        return self.nodes[self.graph.index_of(label)]

    def position(self, label: str) -> tuple[float, float]:
        node = self.node_state(label)
        return node.x, node.y

    def is_pinned(self, label: str) -> bool:
        return self.node_state(label).pinned

    def force(self, name: str) -> Force | None:
        for force in self.forces:
            if force.name == name:
                return force
        return None

    @property
    def settled(self) -> bool:
        """Alpha has decayed below alpha_min and nothing keeps it up."""
        return self.alpha < self.alpha_min and self.alpha_target < self.alpha_min

    # -- mutation entry points ------------------------------------------

    def pin(self, label: str, x: float, y: float) -> None:
        """Fix a node at (x, y); it moves there immediately."""
        node = self.node_state(label)
        node.fx = node.x = x
        node.fy = node.y = y

    def unpin(self, label: str) -> None:
        node = self.node_state(label)
        node.fx = None
        node.fy = None

    def reheat(self, alpha_target: float | None = None) -> None:
        """Raise the alpha target and resume stepping."""
        self.alpha_target = self.config.drag_alpha_target if alpha_target is None else alpha_target
        self.start()

    def cool(self) -> None:
        """Let alpha decay back toward zero on its own."""
        self.alpha_target = 0.0

    def start(self) -> None:
        if not self.active:
            logger.debug("Layout resumed at step %d (alpha=%.4f)", self.steps, self.alpha)
        self.active = True

    def stop(self) -> None:
        if self.active:
            logger.debug("Layout stopped at step %d (alpha=%.4f)", self.steps, self.alpha)
        self.active = False

    def toggle(self) -> bool:
        """Stop a running layout, or reheat a stopped one. Returns ``active``."""
        if self.active:
            self.stop()
        else:
            self.reheat()
        return self.active

    # -- stepping -------------------------------------------------------

    def tick(self, iterations: int = 1) -> None:
        """Advance the solver unconditionally, without calling ``on_step``."""
        for _ in range(iterations):
            self.alpha += (self.alpha_target - self.alpha) * self.alpha_decay

            for force in self.forces:
                force.apply(self.alpha)

            for node in self.nodes:
                if node.fx is None:
                    node.vx *= self.velocity_decay
                    node.x += node.vx
                else:
                    node.x = node.fx
                    node.vx = 0.0
                if node.fy is None:
                    node.vy *= self.velocity_decay
                    node.y += node.vy
                else:
                    node.y = node.fy
                    node.vy = 0.0

            self.steps += 1

    def step(self) -> LayoutSnapshot | None:
        """One tick while active, then the step callback. No-op when stopped."""
        if not self.active:
            return None
        self.tick()
        snapshot = self.snapshot()
        if self.on_step is not None:
            self.on_step(snapshot)
        return snapshot

    def run(self, max_steps: int) -> int:
        """Step until stopped, settled, or ``max_steps``; returns steps taken."""
        taken = 0
        while taken < max_steps and self.active:
            self.step()
            taken += 1
            if self.settled:
                break
        logger.debug("Ran %d step(s); alpha=%.5f settled=%s", taken, self.alpha, self.settled)
        return taken

    def snapshot(self) -> LayoutSnapshot:
        labels = [n.label for n in self.graph.nodes]
        nodes = tuple(
            NodePosition(label=labels[s.index], x=s.x, y=s.y, pinned=s.pinned) for s in self.nodes
        )
        edges = tuple(
            EdgePosition(
                source=labels[link.source],
                target=labels[link.target],
                x1=self.nodes[link.source].x,
                y1=self.nodes[link.source].y,
                x2=self.nodes[link.target].x,
                y2=self.nodes[link.target].y,
            )
            for link in self.links
        )
        return LayoutSnapshot(step=self.steps, alpha=self.alpha, nodes=nodes, edges=edges)
