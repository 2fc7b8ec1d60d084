"""Build the painter/painting graph from dataset records."""

from __future__ import annotations

import logging
from typing import Iterable

from ..config import GraphConfig
from ..dataset.colors import parse_colors
from ..models import PAINTER, PAINTING, ClusterInfo, Edge, Node, PaintingGraph, PaintingRecord

logger = logging.getLogger(__name__)


def aggregate_clusters(
    records: Iterable[PaintingRecord], *, max_per_painter: int
) -> tuple[list[PaintingRecord], dict[str, ClusterInfo]]:
    """Drop malformed, duplicate and over-cap records; aggregate per painter.

    Returns (kept_records, clusters) with both in first-seen order.
    """
    well_formed: list[PaintingRecord] = []
    for record in records:
        if not record.cluster or not record.label:
            logger.debug("Dropping record without artist or filename: %r", record)
            continue
        well_formed.append(record)

    # Painter nodes take the cluster key as their label, so a painting may not.
    cluster_keys = {r.cluster for r in well_formed}

    kept: list[PaintingRecord] = []
    clusters: dict[str, ClusterInfo] = {}
    seen_labels: set[str] = set()

    for record in well_formed:
        if record.label in seen_labels:
            logger.debug("Dropping duplicate painting %s", record.label)
            continue
        if record.label in cluster_keys:
            logger.debug("Dropping painting %s: label collides with a painter", record.label)
            continue

        info = clusters.setdefault(record.cluster, ClusterInfo())
        info.seen += 1
        if info.count >= max_per_painter:
            continue

        seen_labels.add(record.label)
        info.count += 1
        if record.painter_src:
            info.src = record.painter_src
        kept.append(record)

    # A cluster can be seen without keeping anything only when the cap is 0.
    clusters = {k: v for k, v in clusters.items() if v.count > 0}
    return kept, clusters


def rest_length(a: Node, b: Node, config: GraphConfig) -> float:
    """Rest length of the link between ``a`` and ``b``."""
    if config.distance_mode == "product":
        return a.radius * b.radius * config.distance_factor
    return a.radius + b.radius


def build_edges(nodes: list[Node], config: GraphConfig) -> list[Edge]:
    """Emit at most one edge per unordered pair of linked labels."""
    by_label = {n.label: n for n in nodes}
    link_map: dict[str, dict[str, bool]] = {n.label: {} for n in nodes}
    edges: list[Edge] = []

    for node in nodes:
        for label in node.links:
            peer = by_label.get(label)
            if peer is None or peer.label == node.label:
                logger.debug("Skipping link %s -> %s", node.label, label)
                continue
            if link_map[label].get(node.label) or link_map[node.label].get(label):
                continue
            link_map[node.label][label] = True

            same_cluster = node.cluster == peer.cluster
            edges.append(
                Edge(
                    source=node.label,
                    target=label,
                    distance=rest_length(node, peer, config),
                    strength=config.link_strength if same_cluster else config.cross_cluster_link_strength,
                )
            )

    return edges


def build(records: Iterable[PaintingRecord], config: GraphConfig | None = None) -> PaintingGraph:
    """Build nodes (paintings, then one painter per cluster) and edges."""
    config = config or GraphConfig()

    kept, clusters = aggregate_clusters(records, max_per_painter=config.max_paintings_per_painter)

    nodes: list[Node] = [
        Node(
            label=r.label,
            cluster=r.cluster,
            kind=PAINTING,
            radius=config.painting_radius,
            name=r.name or r.label,
            src=r.src,
            colors=parse_colors(r.colors),
            links=(r.cluster,),
        )
        for r in kept
    ]

    for key, info in clusters.items():
        nodes.append(
            Node(
                label=key,
                cluster=key,
                kind=PAINTER,
                radius=config.painter_radius,
                name=key,
                src=info.src or config.default_painter_image,
                links=(),
                count=info.count,
            )
        )

    edges = build_edges(nodes, config)
    logger.info(
        "Built graph: %d paintings, %d painters, %d edges",
        len(kept),
        len(clusters),
        len(edges),
    )
    return PaintingGraph(nodes=nodes, edges=edges, clusters=clusters)
