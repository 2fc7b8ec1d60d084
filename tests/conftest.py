"""Pytest configuration and fixtures."""

import csv
from pathlib import Path

import pytest

from paintgraph.dataset.loader import load_records
from paintgraph.graph.builder import build
from paintgraph.models import PaintingGraph

HEADER = [
    "Artist Name",
    "Filename",
    "Painting Title",
    *[f"Color {i}" for i in range(1, 9)],
    "Artist Filename",
]


def _write_dataset(path: Path, rows: list[dict[str, str]]) -> Path:
    with path.open("w", encoding="utf-8", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=HEADER)
        writer.writeheader()
        for row in rows:
            writer.writerow(row)
    return path


@pytest.fixture
def write_dataset():
    """Write rows (dicts keyed by column name) to a CSV file."""
    return _write_dataset


@pytest.fixture
def dataset_path(tmp_path: Path) -> Path:
    """Two painters: Monet with three paintings, Hokusai with two."""
    rows = [
        {"Artist Name": "Claude Monet", "Filename": "monet-1.jpg", "Painting Title": "Water Lilies",
         "Color 1": "#3b5e8c", "Color 2": "#a7c4a0", "Color 3": ""},
        {"Artist Name": "Claude Monet", "Filename": "monet-2.jpg", "Painting Title": "",
         "Color 1": "d9c27e", "Artist Filename": "monet.jpg"},
        {"Artist Name": "Claude Monet", "Filename": "monet-3.jpg", "Painting Title": "Haystacks"},
        {"Artist Name": "Hokusai", "Filename": "hokusai-1.jpg", "Painting Title": "The Great Wave",
         "Color 1": "#1d3557", "Color 2": "#f1faee"},
        {"Artist Name": "Hokusai", "Filename": "hokusai-2.jpg", "Painting Title": "Red Fuji",
         "Color 1": "#e63946"},
    ]
    return _write_dataset(tmp_path / "raw-data.csv", rows)


@pytest.fixture
def graph(dataset_path: Path) -> PaintingGraph:
    """Graph built from the two-painter dataset with default settings."""
    return build(load_records(dataset_path))
