"""Graph and layout configuration.

Defaults follow the latest prototype. Values the prototypes disagree on
(canvas height, rest-length rule, painter placeholder image) are plain
settings here; override them from a TOML or YAML file:

    [graph]
    max_paintings_per_painter = 10
    distance_mode = "sum"
    link_strength = 1.0

    [layout]
    height = 500
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_PAINTER_IMAGE = (
    "https://cdn.singulart.com/famous/artists/cropped/"
    "famous_artist_65_787b2120f9007faa11ee5dcc543b4148.jpeg"
)

DISTANCE_MODES = ("sum", "product")

# Link strengths above this are known to make the solver diverge.
RECOMMENDED_MAX_LINK_STRENGTH = 2.0


@dataclass(frozen=True)
class GraphConfig:
    max_paintings_per_painter: int = 10
    painting_radius: float = 10.0
    painter_radius: float = 20.0
    distance_mode: str = "sum"  # sum | product
    distance_factor: float = 1.0  # only used by the product mode
    link_strength: float = 1.0
    cross_cluster_link_strength: float = 0.3
    paintings_dir: str = "./paintings/"
    default_painter_image: str = DEFAULT_PAINTER_IMAGE


@dataclass(frozen=True)
class LayoutConfig:
    """Force simulation parameters.

    ``link_strength`` lives on each edge (see GraphConfig). The engine never
    validates or clamps any of these: a link strength above ~2 lets positions
    grow without bound and eventually become NaN.
    """

    width: float = 700.0
    height: float = 800.0

    link_iterations: int = 1
    charge_strength: float = 0.0  # 0 disables many-body repulsion
    charge_distance_min: float = 1.0
    charge_distance_max: float = math.inf
    center_strength: float = 1.0
    collide_strength: float = 0.8
    collide_iterations: int = 1

    alpha: float = 1.0
    alpha_min: float = 0.001
    alpha_decay: float = 1 - 0.001 ** (1 / 300)
    alpha_target: float = 0.0
    velocity_decay: float = 0.4  # fraction of velocity lost per tick
    drag_alpha_target: float = 0.3

    initial_radius: float = 10.0
    seed: int | None = None

    @property
    def center(self) -> tuple[float, float]:
        return self.width / 2, self.height / 2


@dataclass(frozen=True)
class Config:
    graph: GraphConfig = field(default_factory=GraphConfig)
    layout: LayoutConfig = field(default_factory=LayoutConfig)


def _coerce_section(cls: type, raw: Any, section: str) -> Any:
    if raw is None:
        return cls()
    if not isinstance(raw, dict):
        raise ValueError(f"[{section}] must be a table")

    known = {f.name: f for f in fields(cls)}
    values: dict[str, Any] = {}
    for key, value in raw.items():
        if key not in known:
            raise ValueError(f"unknown setting {section}.{key}")
        default = getattr(cls(), key)
        if isinstance(default, bool) or value is None:
            values[key] = value
        elif isinstance(default, float):
            if not isinstance(value, (int, float)) or isinstance(value, bool):
                raise ValueError(f"{section}.{key} must be a number")
            values[key] = float(value)
        elif isinstance(default, int):
            if not isinstance(value, int) or isinstance(value, bool):
                raise ValueError(f"{section}.{key} must be an integer")
            values[key] = value
        elif isinstance(default, str):
            values[key] = str(value)
        else:
            values[key] = value
    return replace(cls(), **values)


def config_from_dict(data: dict[str, Any]) -> Config:
    """Build a Config from parsed ``[graph]`` / ``[layout]`` tables."""
    extra = set(data) - {"graph", "layout"}
    if extra:
        raise ValueError(f"unknown config section(s): {', '.join(sorted(extra))}")

    graph = _coerce_section(GraphConfig, data.get("graph"), "graph")
    layout = _coerce_section(LayoutConfig, data.get("layout"), "layout")

    if graph.distance_mode not in DISTANCE_MODES:
        raise ValueError(f"graph.distance_mode must be one of: {', '.join(DISTANCE_MODES)}")
    if graph.max_paintings_per_painter < 0:
        raise ValueError("graph.max_paintings_per_painter must not be negative")

    for key in ("link_strength", "cross_cluster_link_strength"):
        value = getattr(graph, key)
        if value > RECOMMENDED_MAX_LINK_STRENGTH:
            logger.warning(
                "graph.%s=%s exceeds the recommended maximum of %s; the layout may diverge",
                key,
                value,
                RECOMMENDED_MAX_LINK_STRENGTH,
            )

    return Config(graph=graph, layout=layout)


def load_config(path: Path) -> Config:
    """Load configuration from a .toml or .yml/.yaml file."""
    text = path.read_text(encoding="utf-8")
    suffix = path.suffix.lower()

    if suffix == ".toml":
        import tomllib

        data = tomllib.loads(text)
    elif suffix in (".yml", ".yaml"):
        import yaml

        try:
            data = yaml.safe_load(text) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"invalid YAML in {path.name}: {e}") from e
    else:
        raise ValueError(f"unsupported config format: {path.name} (expected .toml, .yml or .yaml)")

    if not isinstance(data, dict):
        raise ValueError("config root must be a mapping")

    return config_from_dict(data)
