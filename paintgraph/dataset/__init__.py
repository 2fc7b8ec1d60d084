"""Dataset loading and palette parsing."""

from .colors import parse_color, parse_colors
from .loader import DatasetError, load_records, record_from_row

__all__ = [
    "DatasetError",
    "load_records",
    "parse_color",
    "parse_colors",
    "record_from_row",
]
