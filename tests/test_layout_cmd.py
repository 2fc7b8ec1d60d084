import json
from pathlib import Path

import pytest

from paintgraph.commands.layout_cmd import run_clusters, run_layout
from paintgraph.config import DEFAULT_PAINTER_IMAGE, Config, GraphConfig


def test_layout_json_payload(dataset_path: Path, tmp_path: Path) -> None:
    out = tmp_path / "layout.json"
    rc = run_layout(dataset_path, fmt="json", out=out)
    assert rc == 0

    payload = json.loads(out.read_text(encoding="utf-8"))
    assert payload["node_count"] == 7
    assert payload["edge_count"] == 5
    assert payload["steps"] == payload["steps_run"] <= 300
    assert payload["overlaps"] == 0
    assert {c["painter"] for c in payload["clusters"]} == {"Claude Monet", "Hokusai"}

    by_label = {n["label"]: n for n in payload["nodes"]}
    assert by_label["monet-1.jpg"]["colors"] == ["3b5e8c", "a7c4a0"]
    assert by_label["monet-2.jpg"]["name"] == "monet-2.jpg"
    assert by_label["Hokusai"]["src"] == DEFAULT_PAINTER_IMAGE
    for edge in payload["edges"]:
        assert (edge["x1"], edge["y1"]) == (by_label[edge["source"]]["x"], by_label[edge["source"]]["y"])


def test_layout_svg(dataset_path: Path, tmp_path: Path) -> None:
    out = tmp_path / "layout.svg"
    assert run_layout(dataset_path, fmt="svg", out=out) == 0

    svg = out.read_text(encoding="utf-8")
    assert svg.startswith("<svg")
    assert svg.count('<circle class="node painting"') == 5
    assert svg.count('<line class="link"') == 5
    assert 'fill="#3b5e8c"' in svg
    assert 'href="monet.jpg"' in svg
    assert DEFAULT_PAINTER_IMAGE in svg
    assert "<title>Water Lilies</title>" in svg


def test_layout_html_has_panzoom_and_tooltip(dataset_path: Path, tmp_path: Path) -> None:
    out = tmp_path / "layout.html"
    assert run_layout(dataset_path, fmt="html", out=out) == 0

    doc = out.read_text(encoding="utf-8")
    assert "<svg" in doc
    assert "Drag to pan" in doc
    assert "wheel" in doc
    assert "Reset view" in doc
    assert 'id="tooltip"' in doc


def test_layout_html_tooltip_shows_painter_portraits(dataset_path: Path, tmp_path: Path) -> None:
    out = tmp_path / "layout.html"
    assert run_layout(dataset_path, fmt="html", out=out) == 0

    doc = out.read_text(encoding="utf-8")
    assert 'data-kind="painter"' in doc
    assert "if (d.src) img.src = d.src;" in doc
    assert "isPainting && d.src" not in doc


def test_layout_markdown_to_stdout(dataset_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert run_layout(dataset_path, steps=50) == 0

    text = capsys.readouterr().out
    assert text.startswith("## Paintings by painter (raw-data.csv)")
    assert "- Nodes: 7" in text
    assert "| Claude Monet | 3 |" in text


def test_layout_rich_to_file(dataset_path: Path, tmp_path: Path) -> None:
    out = tmp_path / "layout.txt"
    assert run_layout(dataset_path, fmt="rich", out=out, steps=10) == 0
    assert "Hokusai" in out.read_text(encoding="utf-8")


def test_layout_missing_dataset(tmp_path: Path) -> None:
    out = tmp_path / "layout.json"
    assert run_layout(tmp_path / "missing.csv", fmt="json", out=out) == 1
    assert not out.exists()


def test_clusters_report_cap(write_dataset, tmp_path: Path) -> None:
    rows = [{"Artist Name": "Rembrandt", "Filename": f"r{i}.jpg"} for i in range(4)]
    rows.append({"Artist Name": "Vermeer", "Filename": "v0.jpg", "Artist Filename": "vermeer.jpg"})
    path = write_dataset(tmp_path / "raw-data.csv", rows)
    out = tmp_path / "clusters.json"

    config = Config(graph=GraphConfig(max_paintings_per_painter=3))
    assert run_clusters(path, config=config, fmt="json", out=out) == 0

    payload = json.loads(out.read_text(encoding="utf-8"))
    assert payload["row_count"] == 5
    assert payload["kept_count"] == 4
    assert payload["painter_count"] == 2

    rembrandt, vermeer = payload["painters"]
    assert (rembrandt["painter"], rembrandt["rows"], rembrandt["kept"], rembrandt["dropped"]) == ("Rembrandt", 4, 3, 1)
    assert rembrandt["image"] == DEFAULT_PAINTER_IMAGE
    assert vermeer["image"] == "vermeer.jpg"


def test_clusters_markdown(dataset_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert run_clusters(dataset_path) == 0
    text = capsys.readouterr().out
    assert "| Claude Monet | 3 | 3 | 0 |" in text
    assert "| Hokusai | 2 | 2 | 0 |" in text
