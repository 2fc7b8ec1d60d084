"""CSV dataset loading.

One row per painting, with the columns:

    Artist Name, Filename, Painting Title, Color 1 .. Color 8, Artist Filename

``Painting Title`` and ``Artist Filename`` are optional. Row-level problems
(blank artist, blank filename) are left for the graph builder to drop; only a
file that cannot be read as a dataset at all is an error here.
"""

from __future__ import annotations

import csv
import io
import logging
from pathlib import Path
from typing import Mapping

from ..models import PaintingRecord

logger = logging.getLogger(__name__)

CLUSTER_COLUMN = "Artist Name"
LABEL_COLUMN = "Filename"
TITLE_COLUMN = "Painting Title"
PAINTER_IMAGE_COLUMN = "Artist Filename"
COLOR_COLUMNS = tuple(f"Color {i}" for i in range(1, 9))

REQUIRED_COLUMNS = (CLUSTER_COLUMN, LABEL_COLUMN)


class DatasetError(ValueError):
    """The dataset could not be loaded; nothing should be rendered."""


def _cell(row: Mapping[str, str | None], column: str) -> str:
    return (row.get(column) or "").strip()


def record_from_row(row: Mapping[str, str | None], *, paintings_dir: str = "./paintings/") -> PaintingRecord:
    """Convert one CSV row into a record (no validation)."""
    label = _cell(row, LABEL_COLUMN)
    return PaintingRecord(
        cluster=_cell(row, CLUSTER_COLUMN),
        label=label,
        name=_cell(row, TITLE_COLUMN) or label,
        colors=tuple(_cell(row, c) for c in COLOR_COLUMNS),
        src=f"{paintings_dir}{label}" if label else "",
        painter_src=_cell(row, PAINTER_IMAGE_COLUMN),
    )


def load_records(path: Path, *, paintings_dir: str = "./paintings/") -> list[PaintingRecord]:
    """Read every row of the dataset at ``path``.

    Raises:
        DatasetError: the file is missing, unreadable, or lacks the
            ``Artist Name`` / ``Filename`` columns.
    """
    try:
        text = path.read_text(encoding="utf-8-sig")
    except FileNotFoundError as e:
        raise DatasetError(f"dataset not found: {path}") from e
    except (OSError, UnicodeDecodeError) as e:
        raise DatasetError(f"cannot read dataset {path}: {e}") from e

    reader = csv.DictReader(io.StringIO(text, newline=""))
    try:
        header = [h.strip() for h in (reader.fieldnames or [])]
        missing = [c for c in REQUIRED_COLUMNS if c not in header]
        if missing:
            raise DatasetError(f"dataset {path.name} is missing column(s): {', '.join(missing)}")
        reader.fieldnames = header
        records = [record_from_row(row, paintings_dir=paintings_dir) for row in reader]
    except csv.Error as e:
        raise DatasetError(f"malformed CSV in {path.name}: {e}") from e

    logger.debug("Loaded %d rows from %s", len(records), path)
    return records
