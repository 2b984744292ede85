"""buildtrack - construction schedule dependency constraints and arrow layout."""

__version__ = "0.1.0"
