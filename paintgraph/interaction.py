"""Interaction controller: drag, hover, viewport and simulation toggling.

UI events are plain values dispatched through ``InteractionController.handle``.
Drag events are the only writers of pinned positions; hover never mutates
layout state; pan/zoom only touch the viewport transform.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Union

from .layout.state import LayoutState
from .models import Node

logger = logging.getLogger(__name__)

MAX_SWATCHES = 8


@dataclass(frozen=True)
class DragStart:
    label: str


@dataclass(frozen=True)
class DragMove:
    label: str
    x: float  # pointer position in screen coordinates
    y: float


@dataclass(frozen=True)
class DragEnd:
    label: str


@dataclass(frozen=True)
class Hover:
    label: str


@dataclass(frozen=True)
class HoverEnd:
    label: str


@dataclass(frozen=True)
class Pan:
    dx: float
    dy: float


@dataclass(frozen=True)
class Zoom:
    x: float  # zoom anchor in screen coordinates
    y: float
    factor: float


@dataclass(frozen=True)
class ToggleSimulation:
    pass


Event = Union[DragStart, DragMove, DragEnd, Hover, HoverEnd, Pan, Zoom, ToggleSimulation]


@dataclass(frozen=True)
class Tooltip:
    """What a hover shows for one node."""

    label: str
    kind: str
    name: str
    src: str
    swatches: tuple[str, ...] = ()  # up to 8 css colors, paintings only
    count: int = 0  # paintings shown, painters only

    @classmethod
    def for_node(cls, node: Node) -> "Tooltip":
        if node.is_painting:
            return cls(
                label=node.label,
                kind=node.kind,
                name=node.name,
                src=node.src,
                swatches=tuple(c.css for c in node.colors[:MAX_SWATCHES]),
            )
        return cls(label=node.label, kind=node.kind, name=node.name, src=node.src, count=node.count)


@dataclass
class Viewport:
    """Pan/zoom transform from graph space to screen space: ``p * k + (x, y)``."""

    k: float = 1.0
    x: float = 0.0
    y: float = 0.0
    scale_extent: tuple[float, float] = (1 / 3.5, 12.5)

    def apply(self, gx: float, gy: float) -> tuple[float, float]:
        return gx * self.k + self.x, gy * self.k + self.y

    def invert(self, px: float, py: float) -> tuple[float, float]:
        return (px - self.x) / self.k, (py - self.y) / self.k

    def pan(self, dx: float, dy: float) -> None:
        self.x += dx
        self.y += dy

    def zoom_at(self, px: float, py: float, factor: float) -> None:
        """Scale by ``factor`` keeping the graph point under (px, py) fixed."""
        lo, hi = self.scale_extent
        gx, gy = self.invert(px, py)
        self.k = max(lo, min(hi, self.k * factor))
        self.x = px - gx * self.k
        self.y = py - gy * self.k

    def reset(self) -> None:
        self.k = 1.0
        self.x = 0.0
        self.y = 0.0


@dataclass
class InteractionController:
    """Routes UI events to the layout engine and the viewport."""

    state: LayoutState
    viewport: Viewport = field(default_factory=Viewport)
    tooltip: Tooltip | None = None
    dragging: set[str] = field(default_factory=set)

    def __post_init__(self):
        self._handlers: dict[type, Callable[..., object]] = {
            DragStart: lambda e: self.on_drag_start(e.label),
            DragMove: lambda e: self.on_drag_move(e.label, e.x, e.y),
            DragEnd: lambda e: self.on_drag_end(e.label),
            Hover: lambda e: self.on_hover(e.label),
            HoverEnd: lambda e: self.on_hover_end(e.label),
            Pan: lambda e: self.viewport.pan(e.dx, e.dy),
            Zoom: lambda e: self.viewport.zoom_at(e.x, e.y, e.factor),
            ToggleSimulation: lambda e: self.toggle_simulation(),
        }

    def handle(self, event: Event) -> object:
        """Dispatch one event; returns the handler's result (a Tooltip for Hover)."""
        handler = self._handlers.get(type(event))
        if handler is None:
            raise TypeError(f"unsupported event: {event!r}")
        return handler(event)

    def toggle_simulation(self) -> bool:
        active = self.state.toggle()
        logger.debug("Simulation %s", "running" if active else "stopped")
        return active

    def on_drag_start(self, label: str) -> None:
        if not self.dragging:
            self.state.reheat(self.state.config.drag_alpha_target)
        self.dragging.add(label)
        x, y = self.state.position(label)
        self.state.pin(label, x, y)
        self.tooltip = None

    def on_drag_move(self, label: str, x: float, y: float) -> None:
        # Pins are only written for labels tracked in ``dragging``.
        if label not in self.dragging:
            logger.debug("Ignoring drag move for %s without a drag start", label)
            return
        gx, gy = self.viewport.invert(x, y)
        self.state.pin(label, gx, gy)
        self.tooltip = None

    def on_drag_end(self, label: str) -> None:
        self.dragging.discard(label)
        self.state.unpin(label)
        if not self.dragging:
            self.state.cool()

    def on_hover(self, label: str) -> Tooltip | None:
        if label in self.dragging:
            return None
        node = self.state.graph.node(label)
        if node is None:
            return None
        self.tooltip = Tooltip.for_node(node)
        return self.tooltip

    def on_hover_end(self, label: str) -> None:
        if label in self.dragging:
            return
        if self.tooltip is not None and self.tooltip.label == label:
            self.tooltip = None
