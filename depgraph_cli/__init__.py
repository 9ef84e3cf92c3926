"""depgraph-cli: cross-language entity graph and call dependency inference."""

__version__ = "0.3.0"
