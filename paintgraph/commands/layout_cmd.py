"""Layout command - lay out a painting dataset and render the final frame."""

from __future__ import annotations

import html
import json
import math
from pathlib import Path

from rich.console import Console
from rich.table import Table

from ..config import Config
from ..dataset.loader import DatasetError, load_records
from ..graph.builder import aggregate_clusters, build
from ..layout.state import LayoutSnapshot, LayoutState
from ..models import PaintingGraph

# d3.schemeSet1, used for paintings without a palette
SCHEME_SET1 = (
    "#e41a1c",
    "#377eb8",
    "#4daf4a",
    "#984ea3",
    "#ff7f00",
    "#ffff33",
    "#a65628",
    "#f781bf",
    "#999999",
)


def run_layout(
    dataset_path: Path,
    *,
    config: Config | None = None,
    fmt: str = "md",
    out: Path | None = None,
    steps: int = 300,
) -> int:
    """Build the graph, run the layout, and write it in the requested format."""
    console = Console(stderr=True)
    config = config or Config()

    try:
        records = load_records(dataset_path, paintings_dir=config.graph.paintings_dir)
    except DatasetError as e:
        console.print(f"Failed to load dataset: {e}", style="red")
        return 1

    graph = build(records, config.graph)
    state = LayoutState(graph, config.layout)
    taken = state.run(steps)
    snapshot = state.snapshot()

    title = f"Paintings by painter ({dataset_path.name})"
    payload = _layout_payload(graph, snapshot, title=title, settled=state.settled, steps_run=taken)

    if fmt == "rich":
        if out:
            rich_console = Console(record=True)
            _print_rich(payload, console=rich_console)
            out.write_text(rich_console.export_text(), encoding="utf-8")
            console.print(f"Wrote layout output to {out}", style="green")
        else:
            _print_rich(payload, console=Console())
        return 0

    text: str
    if fmt == "json":
        text = json.dumps(payload, indent=2, sort_keys=True) + "\n"
    elif fmt == "svg":
        text = _to_svg(graph, snapshot, title=title, width=config.layout.width, height=config.layout.height)
    elif fmt == "html":
        svg = _to_svg(graph, snapshot, title=title, width=config.layout.width, height=config.layout.height)
        text = _wrap_html(svg, title=title)
    else:
        text = _to_markdown(payload)

    if out:
        out.write_text(text, encoding="utf-8")
        console.print(f"Wrote layout output to {out}", style="green")
    else:
        print(text, end="" if text.endswith("\n") else "\n")

    return 0


def run_clusters(
    dataset_path: Path,
    *,
    config: Config | None = None,
    fmt: str = "md",
    out: Path | None = None,
) -> int:
    """Report paintings per painter before and after the per-painter cap."""
    console = Console(stderr=True)
    config = config or Config()

    try:
        records = load_records(dataset_path, paintings_dir=config.graph.paintings_dir)
    except DatasetError as e:
        console.print(f"Failed to load dataset: {e}", style="red")
        return 1

    cap = config.graph.max_paintings_per_painter
    kept, clusters = aggregate_clusters(records, max_per_painter=cap)

    rows = [
        {
            "painter": key,
            "rows": info.seen,
            "kept": info.count,
            "dropped": info.seen - info.count,
            "image": info.src or config.graph.default_painter_image,
        }
        for key, info in clusters.items()
    ]
    rows.sort(key=lambda r: (-r["kept"], r["painter"]))

    payload = {
        "title": f"Painters in {dataset_path.name}",
        "max_paintings_per_painter": cap,
        "row_count": len(records),
        "kept_count": len(kept),
        "painter_count": len(clusters),
        "painters": rows,
    }

    if fmt == "rich":
        t = Table(title=payload["title"], show_header=True, header_style="bold")
        t.add_column("Painter", style="cyan", no_wrap=True)
        t.add_column("Rows", justify="right")
        t.add_column("Kept", justify="right")
        t.add_column("Dropped", justify="right")
        for r in rows:
            t.add_row(r["painter"], str(r["rows"]), str(r["kept"]), str(r["dropped"]))
        if out:
            rich_console = Console(record=True)
            rich_console.print(t)
            out.write_text(rich_console.export_text(), encoding="utf-8")
            console.print(f"Wrote cluster report to {out}", style="green")
        else:
            Console().print(t)
        return 0

    if fmt == "json":
        text = json.dumps(payload, indent=2, sort_keys=True) + "\n"
    else:
        lines = [
            f"## {payload['title']}",
            "",
            f"- Rows: {payload['row_count']}",
            f"- Kept paintings: {payload['kept_count']} (cap {cap} per painter)",
            f"- Painters: {payload['painter_count']}",
            "",
            "| Painter | Rows | Kept | Dropped |",
            "|---|---:|---:|---:|",
        ]
        for r in rows:
            lines.append(f"| {r['painter']} | {r['rows']} | {r['kept']} | {r['dropped']} |")
        text = "\n".join(lines) + "\n"

    if out:
        out.write_text(text, encoding="utf-8")
        console.print(f"Wrote cluster report to {out}", style="green")
    else:
        print(text, end="")

    return 0


def _layout_payload(
    graph: PaintingGraph,
    snapshot: LayoutSnapshot,
    *,
    title: str,
    settled: bool,
    steps_run: int,
) -> dict:
    positions = {n.label: n for n in snapshot.nodes}

    nodes = []
    for node in graph.nodes:
        pos = positions[node.label]
        nodes.append(
            {
                "label": node.label,
                "kind": node.kind,
                "cluster": node.cluster,
                "name": node.name,
                "src": node.src,
                "radius": node.radius,
                "colors": [c.hex for c in node.colors],
                "x": round(pos.x, 3),
                "y": round(pos.y, 3),
            }
        )

    edges = [
        {
            "source": e.source,
            "target": e.target,
            "distance": edge.distance,
            "x1": round(e.x1, 3),
            "y1": round(e.y1, 3),
            "x2": round(e.x2, 3),
            "y2": round(e.y2, 3),
        }
        for e, edge in zip(snapshot.edges, graph.edges)
    ]

    clusters = []
    for painter in graph.painters:
        px, py = positions[painter.label].x, positions[painter.label].y
        spread = [
            math.hypot(positions[p.label].x - px, positions[p.label].y - py)
            for p in graph.paintings_of(painter.label)
        ]
        clusters.append(
            {
                "painter": painter.label,
                "paintings": painter.count,
                "x": round(px, 1),
                "y": round(py, 1),
                "max_distance": round(max(spread, default=0.0), 1),
            }
        )

    return {
        "title": title,
        "node_count": len(graph.nodes),
        "edge_count": len(graph.edges),
        "steps": snapshot.step,
        "steps_run": steps_run,
        "alpha": round(snapshot.alpha, 6),
        "settled": settled,
        "overlaps": _count_overlaps(graph, snapshot),
        "clusters": clusters,
        "nodes": nodes,
        "edges": edges,
    }


def _count_overlaps(graph: PaintingGraph, snapshot: LayoutSnapshot, *, epsilon: float = 0.5) -> int:
    """Pairs of node circles closer than the sum of their radii (minus epsilon)."""
    pts = [(n.x, n.y, node.radius) for n, node in zip(snapshot.nodes, graph.nodes)]
    count = 0
    for i in range(len(pts)):
        xi, yi, ri = pts[i]
        for j in range(i + 1, len(pts)):
            xj, yj, rj = pts[j]
            if math.hypot(xi - xj, yi - yj) < ri + rj - epsilon:
                count += 1
    return count


def _to_markdown(payload: dict) -> str:
    lines: list[str] = []
    lines.append(f"## {payload['title']}")
    lines.append("")
    lines.append(f"- Nodes: {payload['node_count']}")
    lines.append(f"- Edges: {payload['edge_count']}")
    lines.append(f"- Steps: {payload['steps']} (alpha {payload['alpha']}, settled: {payload['settled']})")
    lines.append(f"- Overlapping pairs: {payload['overlaps']}")
    lines.append("")
    lines.append("| Painter | Paintings | x | y | Max distance |")
    lines.append("|---|---:|---:|---:|---:|")
    for c in payload["clusters"]:
        lines.append(f"| {c['painter']} | {c['paintings']} | {c['x']} | {c['y']} | {c['max_distance']} |")
    return "\n".join(lines).rstrip() + "\n"


def _print_rich(payload: dict, *, console: Console) -> None:
    console.print(f"[bold]{payload['title']}[/bold]")
    console.print(f"Nodes: {payload['node_count']}  Edges: {payload['edge_count']}  Steps: {payload['steps']}")
    console.print()

    t = Table(title="Painters", show_header=True, header_style="bold")
    t.add_column("Painter", style="cyan", no_wrap=True)
    t.add_column("Paintings", justify="right")
    t.add_column("Position", justify="right")
    t.add_column("Max distance", justify="right")
    for c in payload["clusters"]:
        t.add_row(c["painter"], str(c["paintings"]), f"({c['x']}, {c['y']})", str(c["max_distance"]))
    console.print(t)


def _node_fill(graph: PaintingGraph, label: str, cluster_index: dict[str, int]) -> str:
    node = graph.node(label)
    if node is None or not node.is_painting:
        return "#000000"
    if node.colors:
        return node.colors[0].css
    return SCHEME_SET1[cluster_index.get(node.cluster, 0) % len(SCHEME_SET1)]


def _to_svg(
    graph: PaintingGraph,
    snapshot: LayoutSnapshot,
    *,
    title: str,
    width: float,
    height: float,
) -> str:
    """Render one layout frame: link lines under painting circles and painter portraits."""

    def esc(s: str) -> str:
        return html.escape(s, quote=True)

    bg = "#fafafa"
    edge_color = "#999999"
    text_color = "#222222"

    cluster_index = {p.label: i for i, p in enumerate(graph.painters)}
    positions = {n.label: (n.x, n.y) for n in snapshot.nodes}

    parts: list[str] = []
    parts.append(
        f'<svg xmlns="http://www.w3.org/2000/svg" xmlns:xlink="http://www.w3.org/1999/xlink" '
        f'width="{width:.0f}" height="{height:.0f}" viewBox="0 0 {width:.0f} {height:.0f}" '
        f'style="background:{bg}">'
    )
    parts.append(f"<title>{esc(title)}</title>")
    parts.append('<g id="scene">')

    parts.append(f'<g class="link-container" stroke="{edge_color}" stroke-width="1" opacity="0.7">')
    for e in snapshot.edges:
        parts.append(
            f'<line class="link" data-source="{esc(e.source)}" data-target="{esc(e.target)}" '
            f'x1="{e.x1:.1f}" y1="{e.y1:.1f}" x2="{e.x2:.1f}" y2="{e.y2:.1f}"/>'
        )
    parts.append("</g>")

    parts.append('<g class="node-container">')
    for node in graph.nodes:
        x, y = positions[node.label]
        r = node.radius
        data = (
            f'data-label="{esc(node.label)}" data-kind="{node.kind}" data-name="{esc(node.name)}" '
            f'data-src="{esc(node.src)}"'
        )
        if node.is_painter:
            clip_id = f"clip-{cluster_index[node.label]}"
            parts.append(
                f'<clipPath id="{clip_id}"><circle cx="{x:.1f}" cy="{y:.1f}" r="{r:.1f}"/></clipPath>'
            )
            parts.append(
                f'<image class="node painter" {data} data-count="{node.count}" '
                f'x="{(x - r):.1f}" y="{(y - r):.1f}" width="{2 * r:.1f}" height="{2 * r:.1f}" '
                f'href="{esc(node.src)}" clip-path="url(#{clip_id})">'
                f"<title>{esc(node.name)} ({node.count} paintings)</title></image>"
            )
        else:
            swatches = " ".join(c.css for c in node.colors)
            fill = _node_fill(graph, node.label, cluster_index)
            parts.append(
                f'<circle class="node painting" {data} data-colors="{esc(swatches)}" '
                f'cx="{x:.1f}" cy="{y:.1f}" r="{r:.1f}" fill="{fill}">'
                f"<title>{esc(node.name)}</title></circle>"
            )
    parts.append("</g>")

    parts.append("</g>")
    parts.append(
        f'<text x="12" y="{(height - 12):.0f}" fill="{text_color}" font-family="Helvetica" '
        f'font-size="11">{esc(title)} - step {snapshot.step}</text>'
    )
    parts.append("</svg>")
    return "\n".join(parts) + "\n"


def _wrap_html(svg: str, *, title: str) -> str:
    """Standalone page: pan/zoom on the scene group plus a hover tooltip with palette swatches."""
    t = html.escape(title, quote=True)
    return (
        "<!doctype html>\n"
        "<html>\n"
        "<head>\n"
        f"  <meta charset=\"utf-8\" />\n  <title>{t}</title>\n"
        "  <meta name=\"viewport\" content=\"width=device-width, initial-scale=1\" />\n"
        "  <style>\n"
        "    body { margin: 0; font-family: system-ui, -apple-system, Segoe UI, Roboto, Helvetica, Arial; }\n"
        "    .toolbar { display: flex; gap: 8px; align-items: center; padding: 8px; }\n"
        "    .hint { color: #666; font-size: 12px; }\n"
        "    svg { display: block; touch-action: none; user-select: none; }\n"
        "    .link.highlight { stroke: #333; stroke-width: 2; }\n"
        "    #tooltip { position: fixed; display: none; pointer-events: none; background: #fff;\n"
        "               border: 1px solid #ccc; border-radius: 6px; padding: 8px; font-size: 13px; }\n"
        "    #tooltip .pal { display: flex; margin-top: 6px; }\n"
        "    #tooltip .pal span { width: 25px; height: 25px; }\n"
        "    #tooltip img { display: block; max-width: 200px; max-height: 200px; margin-top: 6px; }\n"
        "  </style>\n"
        "</head>\n"
        "<body>\n"
        "  <div class=\"toolbar\">\n"
        "    <button id=\"resetBtn\" type=\"button\">Reset view</button>\n"
        "    <span class=\"hint\">Drag to pan, scroll to zoom, hover a node for details</span>\n"
        "  </div>\n"
        f"{svg}"
        "  <div id=\"tooltip\"><div id=\"name\"></div><div class=\"pal\" id=\"pal\"></div><img id=\"image\" alt=\"\" /></div>\n"
        "  <script>\n"
        "    (function () {\n"
        "      const svg = document.querySelector('svg');\n"
        "      const scene = document.getElementById('scene');\n"
        "      const tip = document.getElementById('tooltip');\n"
        "      if (!svg || !scene) return;\n"
        "\n"
        "      let view = { k: 1, x: 0, y: 0 };\n"
        "      const render = () => scene.setAttribute('transform', `translate(${view.x},${view.y}) scale(${view.k})`);\n"
        "      const zoomAt = (px, py, factor) => {\n"
        "        const k = Math.max(1 / 3.5, Math.min(12.5, view.k * factor));\n"
        "        const gx = (px - view.x) / view.k;\n"
        "        const gy = (py - view.y) / view.k;\n"
        "        view = { k, x: px - gx * k, y: py - gy * k };\n"
        "        render();\n"
        "      };\n"
        "\n"
        "      let panning = null;\n"
        "      svg.addEventListener('pointerdown', (e) => {\n"
        "        panning = { x: e.clientX, y: e.clientY, vx: view.x, vy: view.y };\n"
        "        svg.setPointerCapture(e.pointerId);\n"
        "        tip.style.display = 'none';\n"
        "      });\n"
        "      svg.addEventListener('pointerup', () => { panning = null; });\n"
        "      svg.addEventListener('pointercancel', () => { panning = null; });\n"
        "      svg.addEventListener('pointermove', (e) => {\n"
        "        if (!panning) return;\n"
        "        view.x = panning.vx + e.clientX - panning.x;\n"
        "        view.y = panning.vy + e.clientY - panning.y;\n"
        "        render();\n"
        "      });\n"
        "      svg.addEventListener('wheel', (e) => {\n"
        "        e.preventDefault();\n"
        "        const rect = svg.getBoundingClientRect();\n"
        "        zoomAt(e.clientX - rect.left, e.clientY - rect.top, e.deltaY > 0 ? 1 / 1.15 : 1.15);\n"
        "      }, { passive: false });\n"
        "      document.getElementById('resetBtn').addEventListener('click', () => { view = { k: 1, x: 0, y: 0 }; render(); });\n"
        "\n"
        "      const lines = (label) => scene.querySelectorAll(`.link[data-source=\"${CSS.escape(label)}\"], .link[data-target=\"${CSS.escape(label)}\"]`);\n"
        "      scene.querySelectorAll('.node').forEach((node) => {\n"
        "        node.addEventListener('mousemove', (e) => {\n"
        "          if (panning) return;\n"
        "          const d = node.dataset;\n"
        "          const isPainting = d.kind === 'painting';\n"
        "          document.getElementById('name').textContent = isPainting ? d.name : `${d.name} (${d.count} paintings)`;\n"
        "          const pal = document.getElementById('pal');\n"
        "          pal.innerHTML = '';\n"
        "          (d.colors || '').split(' ').filter(Boolean).slice(0, 8).forEach((c) => {\n"
        "            const s = document.createElement('span');\n"
        "            s.style.background = c;\n"
        "            pal.appendChild(s);\n"
        "          });\n"
        "          const img = document.getElementById('image');\n"
        "          img.style.display = d.src ? 'block' : 'none';\n"
        "          if (d.src) img.src = d.src;\n"
        "          tip.style.display = 'block';\n"
        "          tip.style.left = `${e.clientX + 10}px`;\n"
        "          tip.style.top = `${e.clientY + 10}px`;\n"
        "          lines(d.label).forEach((l) => l.classList.add('highlight'));\n"
        "        });\n"
        "        node.addEventListener('mouseout', () => {\n"
        "          tip.style.display = 'none';\n"
        "          lines(node.dataset.label).forEach((l) => l.classList.remove('highlight'));\n"
        "        });\n"
        "      });\n"
        "    })();\n"
        "  </script>\n"
        "</body>\n"
        "</html>\n"
    )
