"""Graph construction."""

from .builder import aggregate_clusters, build, build_edges, rest_length

__all__ = ["aggregate_clusters", "build", "build_edges", "rest_length"]
