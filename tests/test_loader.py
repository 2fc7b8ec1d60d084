from pathlib import Path

import pytest

from paintgraph.dataset.loader import DatasetError, load_records, record_from_row


def test_load_records_reads_every_row(dataset_path: Path) -> None:
    records = load_records(dataset_path)
    assert [r.label for r in records] == [
        "monet-1.jpg",
        "monet-2.jpg",
        "monet-3.jpg",
        "hokusai-1.jpg",
        "hokusai-2.jpg",
    ]
    first = records[0]
    assert first.cluster == "Claude Monet"
    assert first.name == "Water Lilies"
    assert first.src == "./paintings/monet-1.jpg"
    assert len(first.colors) == 8


def test_title_falls_back_to_filename(dataset_path: Path) -> None:
    records = load_records(dataset_path)
    assert records[1].name == "monet-2.jpg"
    assert records[1].painter_src == "monet.jpg"


def test_paintings_dir_prefixes_image_path(dataset_path: Path) -> None:
    records = load_records(dataset_path, paintings_dir="img/")
    assert records[0].src == "img/monet-1.jpg"


def test_missing_dataset_is_a_dataset_error(tmp_path: Path) -> None:
    with pytest.raises(DatasetError, match="not found"):
        load_records(tmp_path / "nope.csv")


def test_missing_required_column_is_a_dataset_error(tmp_path: Path) -> None:
    path = tmp_path / "bad.csv"
    path.write_text("Painter,Filename\nMonet,a.jpg\n", encoding="utf-8")
    with pytest.raises(DatasetError, match="Artist Name"):
        load_records(path)


def test_byte_order_mark_and_padded_headers(tmp_path: Path) -> None:
    path = tmp_path / "bom.csv"
    path.write_text("\ufeffArtist Name , Filename\nMonet,a.jpg\n", encoding="utf-8")
    records = load_records(path)
    assert records[0].cluster == "Monet"
    assert records[0].label == "a.jpg"


def test_record_from_row_tolerates_missing_optional_columns() -> None:
    record = record_from_row({"Artist Name": " Monet ", "Filename": "a.jpg"})
    assert record.cluster == "Monet"
    assert record.painter_src == ""
    assert record.colors == ("",) * 8
