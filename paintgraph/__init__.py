"""paintgraph - force-directed painter/painting graph layouts."""

__version__ = "0.1.0"
