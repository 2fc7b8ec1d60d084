import itertools
import math

import pytest

from paintgraph.config import LayoutConfig
from paintgraph.graph.builder import build
from paintgraph.layout.state import LayoutSnapshot, LayoutState
from paintgraph.models import PaintingGraph, PaintingRecord


def _painter_with(n: int) -> PaintingGraph:
    records = [PaintingRecord(cluster="Vermeer", label=f"v{i}.jpg", name=f"v{i}") for i in range(n)]
    return build(records)


def test_nodes_start_on_distinct_finite_positions(graph: PaintingGraph) -> None:
    state = LayoutState(graph)
    points = {state.position(n.label) for n in graph.nodes}
    assert len(points) == len(graph.nodes)
    assert all(math.isfinite(x) and math.isfinite(y) for x, y in points)


def test_default_forces_and_inert_charge(graph: PaintingGraph) -> None:
    state = LayoutState(graph)
    assert [f.name for f in state.forces] == ["link", "charge", "center", "collide"]
    assert state.force("charge").strength == 0


def test_three_paintings_settle_without_overlap() -> None:
    graph = _painter_with(3)
    state = LayoutState(graph, LayoutConfig(seed=1))

    for _ in range(500):
        state.step()

    for a, b in itertools.combinations(graph.nodes, 2):
        (xa, ya), (xb, yb) = state.position(a.label), state.position(b.label)
        assert math.hypot(xa - xb, ya - yb) >= a.radius + b.radius - 0.1

    px, py = state.position("Vermeer")
    for painting in graph.paintings:
        x, y = state.position(painting.label)
        assert math.hypot(x - px, y - py) < 60


def test_layout_stays_near_canvas_center(graph: PaintingGraph) -> None:
    config = LayoutConfig(width=700, height=500)
    state = LayoutState(graph, config)
    state.run(300)

    xs = [state.position(n.label)[0] for n in graph.nodes]
    ys = [state.position(n.label)[1] for n in graph.nodes]
    assert sum(xs) / len(xs) == pytest.approx(350, abs=1.0)
    assert sum(ys) / len(ys) == pytest.approx(250, abs=1.0)


def test_pinned_node_stays_exactly_on_pin() -> None:
    graph = _painter_with(4)
    state = LayoutState(graph)

    state.pin("v0.jpg", 100.0, 100.0)
    for _ in range(50):
        state.step()
        assert state.position("v0.jpg") == (100.0, 100.0)

    assert state.is_pinned("v0.jpg")
    assert state.snapshot().position("v0.jpg") == (100.0, 100.0)


def test_pin_moves_node_immediately() -> None:
    state = LayoutState(_painter_with(2))
    state.stop()
    state.pin("v1.jpg", -40.0, 12.5)
    assert state.position("v1.jpg") == (-40.0, 12.5)


def test_unpinned_node_resumes_moving() -> None:
    graph = _painter_with(3)
    state = LayoutState(graph)
    state.run(300)

    state.reheat()
    state.pin("v0.jpg", 100.0, 100.0)
    state.step()
    assert state.position("v0.jpg") == (100.0, 100.0)

    state.unpin("v0.jpg")
    for _ in range(5):
        state.step()
    assert state.position("v0.jpg") != (100.0, 100.0)
    assert not state.is_pinned("v0.jpg")


def test_step_callback_sees_completed_positions(graph: PaintingGraph) -> None:
    seen: list[tuple[LayoutSnapshot, dict[str, tuple[float, float]]]] = []

    def on_step(snapshot: LayoutSnapshot) -> None:
        seen.append((snapshot, {n.label: state.position(n.label) for n in graph.nodes}))

    state = LayoutState(graph, on_step=on_step)
    state.step()
    state.step()

    assert [s.step for s, _ in seen] == [1, 2]
    snapshot, live = seen[-1]
    assert {n.label: (n.x, n.y) for n in snapshot.nodes} == live
    for edge in snapshot.edges:
        assert (edge.x1, edge.y1) == live[edge.source]
        assert (edge.x2, edge.y2) == live[edge.target]


def test_stop_freezes_positions(graph: PaintingGraph) -> None:
    calls: list[LayoutSnapshot] = []
    state = LayoutState(graph, on_step=calls.append)
    state.step()
    before = state.snapshot()

    state.stop()
    assert state.step() is None
    assert state.run(10) == 0

    assert state.snapshot() == before
    assert len(calls) == 1


def test_toggle_resumes_with_persisted_velocities(graph: PaintingGraph) -> None:
    state = LayoutState(graph)
    state.step()
    velocities = [(n.vx, n.vy) for n in state.nodes]

    assert state.toggle() is False
    assert state.toggle() is True
    assert state.alpha_target == state.config.drag_alpha_target
    assert [(n.vx, n.vy) for n in state.nodes] == velocities


def test_alpha_decays_toward_target(graph: PaintingGraph) -> None:
    state = LayoutState(graph)
    state.run(50)
    assert state.alpha < 1.0

    state.reheat(0.3)
    for _ in range(600):
        state.step()
    assert abs(state.alpha - 0.3) < 1e-3
    assert not state.settled

    state.cool()
    assert state.alpha_target == 0.0


def test_run_returns_early_once_settled(graph: PaintingGraph) -> None:
    state = LayoutState(graph, LayoutConfig(alpha=0.0005))
    assert state.run(100) == 1
    assert state.settled
    assert state.active


def test_run_respects_max_steps(graph: PaintingGraph) -> None:
    state = LayoutState(graph)
    assert state.run(7) == 7
    assert state.steps == 7


def test_tick_does_not_call_step_callback(graph: PaintingGraph) -> None:
    calls: list[LayoutSnapshot] = []
    state = LayoutState(graph, on_step=calls.append)
    state.tick(3)
    assert state.steps == 3
    assert calls == []
